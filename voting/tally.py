"""Cycle tally computation

Turns a cycle snapshot and its ballots into per-nominee and per-location
statistics. Pure: no I/O, no clock, same inputs always give the same output.

Algorithm:
1. De-duplicate each ballot's selections (a ballot counts at most once per nominee)
2. Count every selection toward total_selections, including stale nominee ids
3. Credit each selection to the nominee, and to every cycle location the
   NOMINEE is assigned to (the voter's own store plays no part)
4. Sum per-location credits into location totals
5. Derive points (votes x vote_points) and percentages (0 when the
   denominator is 0)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from database.models import Ballot, Employee, Location, VotingCycle


def percentage(part: int, whole: int) -> float:
    """part / whole * 100, or 0.0 when whole is 0"""
    if whole <= 0:
        return 0.0
    return part / whole * 100


@dataclass(frozen=True)
class CycleSnapshot:
    """A cycle with its location and nominee references resolved

    locations keeps the cycle's ordering. References that no longer resolve
    in the directory are simply absent.
    """

    cycle: VotingCycle
    locations: List[Location]
    nominees: List[Employee]

    @property
    def location_ids(self) -> List[str]:
        return [loc.id for loc in self.locations]

    def nominee_location_ids(self, nominee: Employee) -> List[str]:
        """Cycle locations this nominee is assigned to, in cycle order"""
        own = set(nominee.location_ids)
        return [loc.id for loc in self.locations if loc.id in own]


@dataclass
class NomineeStat:
    """Cycle-wide numbers for one nominee"""

    employee: Employee
    location_ids: List[str]
    total_votes: int = 0
    total_points: int = 0
    overall_percentage: float = 0.0
    votes_by_location: Dict[str, int] = field(default_factory=dict)

    def to_dict(self, locations: Dict[str, Location]) -> Dict[str, Any]:
        data = self.employee.to_dict()
        data.update(
            {
                "location_ids": list(self.location_ids),
                "total_votes": self.total_votes,
                "total_points": self.total_points,
                "overall_percentage": self.overall_percentage,
                "votes_by_location": [
                    {
                        "location_id": loc_id,
                        "name": locations[loc_id].name,
                        "code": locations[loc_id].code,
                        "votes": votes,
                    }
                    for loc_id, votes in self.votes_by_location.items()
                ],
            }
        )
        return data


@dataclass
class NomineeLocationStat:
    """One nominee's numbers seen from one location"""

    employee: Employee
    total_votes: int
    total_points: int
    overall_percentage: float
    location_votes: int
    location_points: int
    location_percentage: float

    @property
    def employee_id(self) -> str:
        return self.employee.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.employee.to_dict()
        data.update(
            {
                "total_votes": self.total_votes,
                "total_points": self.total_points,
                "overall_percentage": self.overall_percentage,
                "location_votes": self.location_votes,
                "location_points": self.location_points,
                "location_percentage": self.location_percentage,
            }
        )
        return data


@dataclass
class LocationSummary:
    location: Location
    total_nominee_votes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location_id": self.location.id,
            "name": self.location.name,
            "code": self.location.code,
            "total_nominee_votes": self.total_nominee_votes,
        }


@dataclass
class CycleTally:
    """Complete tally of one cycle

    nominees follows the snapshot's nominee order and locations the cycle's
    location order; every cycle nominee and location is present even with
    zero votes.
    """

    cycle: VotingCycle
    total_voters: int
    total_ballots: int
    total_selections: int
    vote_points: int
    nominees: List[NomineeStat]
    locations: List[LocationSummary]

    def nominee(self, employee_id: str) -> Optional[NomineeStat]:
        for stat in self.nominees:
            if stat.employee.id == employee_id:
                return stat
        return None

    def location_summary(self, location_id: str) -> Optional[LocationSummary]:
        for summary in self.locations:
            if summary.location.id == location_id:
                return summary
        return None

    def location_stats(self, location_id: str) -> List[NomineeLocationStat]:
        """Every cycle nominee as seen from one location

        Nominees not assigned to the location appear with zero location votes.
        """
        summary = self.location_summary(location_id)
        location_total = summary.total_nominee_votes if summary else 0

        stats = []
        for nominee in self.nominees:
            votes = nominee.votes_by_location.get(location_id, 0)
            stats.append(
                NomineeLocationStat(
                    employee=nominee.employee,
                    total_votes=nominee.total_votes,
                    total_points=nominee.total_points,
                    overall_percentage=nominee.overall_percentage,
                    location_votes=votes,
                    location_points=votes * self.vote_points,
                    location_percentage=percentage(votes, location_total),
                )
            )
        return stats

    def meta_dict(self) -> Dict[str, Any]:
        """Cycle header used by every report-style response"""
        cycle = self.cycle
        return {
            "id": cycle.id,
            "name": cycle.name,
            "start_at": cycle.start_at.isoformat(),
            "end_at": cycle.end_at.isoformat(),
            "locations": [s.location.to_dict() for s in self.locations],
            "vote_points": cycle.vote_points,
            "max_votes_per_voter": cycle.max_votes_per_voter,
            "total_voters": self.total_voters,
            "total_ballots": self.total_ballots,
            "total_selections": self.total_selections,
        }

    def to_dict(self) -> Dict[str, Any]:
        locations = {s.location.id: s.location for s in self.locations}
        return {
            "cycle": self.meta_dict(),
            "nominees": [n.to_dict(locations) for n in self.nominees],
            "location_summary": [s.to_dict() for s in self.locations],
        }


def compute_tally(snapshot: CycleSnapshot, ballots: Sequence[Ballot]) -> CycleTally:
    """Compute the full tally for one cycle

    Args:
        snapshot: Cycle with resolved locations and nominees
        ballots: Every ballot cast for the cycle

    Returns:
        CycleTally; all zeros for an empty ballot list
    """
    cycle = snapshot.cycle
    vote_points = cycle.vote_points or 1

    nominee_stats: Dict[str, NomineeStat] = {}
    for nominee in snapshot.nominees:
        nominee_stats[nominee.id] = NomineeStat(
            employee=nominee,
            location_ids=snapshot.nominee_location_ids(nominee),
        )

    total_selections = 0
    for ballot in ballots:
        selections = list(dict.fromkeys(ballot.nominee_ids))
        total_selections += len(selections)

        for nominee_id in selections:
            stat = nominee_stats.get(nominee_id)
            if stat is None:
                continue
            stat.total_votes += 1
            for loc_id in stat.location_ids:
                stat.votes_by_location[loc_id] = stat.votes_by_location.get(loc_id, 0) + 1

    summaries = {loc.id: LocationSummary(location=loc) for loc in snapshot.locations}
    for stat in nominee_stats.values():
        stat.total_points = stat.total_votes * vote_points
        stat.overall_percentage = percentage(stat.total_votes, total_selections)
        for loc_id, votes in stat.votes_by_location.items():
            summaries[loc_id].total_nominee_votes += votes

    return CycleTally(
        cycle=cycle,
        total_voters=len(cycle.voter_ids),
        total_ballots=len(ballots),
        total_selections=total_selections,
        vote_points=vote_points,
        nominees=list(nominee_stats.values()),
        locations=[summaries[loc.id] for loc in snapshot.locations],
    )
