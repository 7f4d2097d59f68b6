"""Voting cycle lifecycle and ballot eligibility rules

Cycle state is derived from the clock, never stored:
    upcoming  now < start_at
    active    start_at <= now <= end_at
    ended     now > end_at

Eligibility checks return Eligibility values instead of raising, so the
same rules serve the pre-check endpoint, direct casting and invite casting.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from database.models import Employee, VotingCycle


def utcnow() -> datetime:
    """Timezone-aware current time; every comparison here is in UTC"""
    return datetime.now(timezone.utc)


class CycleStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"


def has_started(cycle: VotingCycle, now: datetime) -> bool:
    return now >= cycle.start_at


def has_ended(cycle: VotingCycle, now: datetime) -> bool:
    return now > cycle.end_at


def cycle_status(cycle: VotingCycle, now: datetime) -> CycleStatus:
    if not has_started(cycle, now):
        return CycleStatus.UPCOMING
    if has_ended(cycle, now):
        return CycleStatus.ENDED
    return CycleStatus.ACTIVE


class EligibilityCode(str, Enum):
    OK = "ok"
    NOT_STARTED = "not_started"
    ENDED = "ended"
    UNAUTHORIZED = "unauthorized"
    ALREADY_VOTED = "already_voted"
    EMPTY_SELECTION = "empty_selection"
    TOO_MANY_SELECTIONS = "too_many_selections"
    INVALID_NOMINEE = "invalid_nominee"


@dataclass(frozen=True)
class Eligibility:
    code: EligibilityCode
    message: str

    @property
    def ok(self) -> bool:
        return self.code is EligibilityCode.OK

    @classmethod
    def allowed(cls) -> "Eligibility":
        return cls(EligibilityCode.OK, "You are eligible to vote")


def check_voting_window(cycle: VotingCycle, now: datetime) -> Eligibility:
    status = cycle_status(cycle, now)
    if status is CycleStatus.UPCOMING:
        return Eligibility(EligibilityCode.NOT_STARTED, "Voting has not started yet")
    if status is CycleStatus.ENDED:
        return Eligibility(EligibilityCode.ENDED, "Voting has ended")
    return Eligibility.allowed()


def check_voter(cycle: VotingCycle, voter_id: str) -> Eligibility:
    if not cycle.has_voter(voter_id):
        return Eligibility(EligibilityCode.UNAUTHORIZED, "You are not allowed to vote in this poll")
    return Eligibility.allowed()


def check_selection(cycle: VotingCycle, nominee_ids: Sequence[str]) -> Eligibility:
    """Size limits first, then membership of every selected nominee"""
    if not nominee_ids:
        return Eligibility(EligibilityCode.EMPTY_SELECTION, "Please select at least one nominee")

    if len(nominee_ids) > cycle.max_votes_per_voter:
        return Eligibility(
            EligibilityCode.TOO_MANY_SELECTIONS,
            f"You can select up to {cycle.max_votes_per_voter} nominees",
        )

    if any(not cycle.has_nominee(n) for n in nominee_ids):
        return Eligibility(EligibilityCode.INVALID_NOMINEE, "Invalid nominee selected")

    return Eligibility.allowed()


def check_ballot(
    cycle: VotingCycle,
    voter_id: str,
    nominee_ids: Sequence[str],
    already_voted: bool,
    now: datetime,
) -> Eligibility:
    """Run every casting rule in order and stop at the first failure

    1. cycle active
    2. voter in the cycle's voter set
    3. no ballot yet
    4. 1..max_votes_per_voter selections
    5. every selection is a cycle nominee

    nominee_ids should already be normalized (see normalize_id_list).
    """
    verdict = check_voting_window(cycle, now)
    if not verdict.ok:
        return verdict

    verdict = check_voter(cycle, voter_id)
    if not verdict.ok:
        return verdict

    if already_voted:
        return Eligibility(EligibilityCode.ALREADY_VOTED, "You have already voted in this poll")

    return check_selection(cycle, nominee_ids)


def normalize_id_list(values: Optional[Iterable[str]]) -> List[str]:
    """Trim ids, drop blanks and duplicates, keep first-seen order"""
    if not values:
        return []
    cleaned = (str(v).strip() for v in values if v is not None)
    return list(dict.fromkeys(v for v in cleaned if v))


def check_cycle_membership(
    location_ids: Sequence[str],
    voters: Sequence[Employee],
    nominees: Sequence[Employee],
) -> Optional[str]:
    """Every voter and nominee must work at one of the cycle's locations

    Returns:
        Error message naming the first offender, or None when valid
    """
    cycle_locations = set(location_ids)

    for role, people in (("Voter", voters), ("Nominee", nominees)):
        for person in people:
            if not cycle_locations.intersection(person.location_ids):
                return (
                    f"{role} {person.full_name} ({person.employee_code}) "
                    "is not assigned to any of the selected locations"
                )
    return None
