"""Voting engine - tally, tie detection and cycle lifecycle rules

Pure functions over cycle snapshots and ballots. Services load the data,
call into this package and turn value results into API errors.
"""

from voting.lifecycle import (
    CycleStatus,
    Eligibility,
    EligibilityCode,
    check_ballot,
    cycle_status,
)
from voting.resolver import (
    AnnouncementCheck,
    LocationResult,
    check_announcement,
    has_unresolved_tie,
    resolve_cycle,
    resolve_location,
)
from voting.tally import CycleSnapshot, CycleTally, compute_tally

__all__ = [
    "AnnouncementCheck",
    "CycleSnapshot",
    "CycleStatus",
    "CycleTally",
    "Eligibility",
    "EligibilityCode",
    "LocationResult",
    "check_announcement",
    "check_ballot",
    "compute_tally",
    "cycle_status",
    "has_unresolved_tie",
    "resolve_cycle",
    "resolve_location",
]
