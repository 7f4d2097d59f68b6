"""Tie detection and winner resolution per location

Works on CycleTally output. Automatic winners are derived here on every
read and never stored; only manual tie-breaks are persisted, as
WinnerRecord rows.

Per location:
1. max_votes = highest location vote count (0 when nobody got a vote)
2. top_nominees = nominees at max_votes, empty when max_votes is 0
3. is_tie = more than one top nominee
4. Official winner, first match wins:
   a. persisted WinnerRecord -> is_auto False
   b. cycle ended and exactly one top nominee -> is_auto True
   c. none
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from database.models import Location, WinnerRecord
from voting.lifecycle import has_ended
from voting.tally import CycleSnapshot, CycleTally, NomineeLocationStat


@dataclass
class OfficialWinner:
    stat: NomineeLocationStat
    is_auto: bool
    announced_at: Optional[datetime] = None

    @property
    def employee_id(self) -> str:
        return self.stat.employee.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.stat.to_dict()
        data["announced_at"] = self.announced_at.isoformat() if self.announced_at else None
        data["is_auto"] = self.is_auto
        return data


@dataclass
class LocationResult:
    """Resolved standings and winner for one location

    nominees is sorted by location votes, highest first; equal counts keep
    the cycle's nominee order.
    """

    location: Location
    total_votes: int
    max_votes: int
    nominees: List[NomineeLocationStat]
    top_nominees: List[NomineeLocationStat]
    is_tie: bool
    official_winner: Optional[OfficialWinner]
    needs_tie_resolution: bool

    @property
    def location_id(self) -> str:
        return self.location.id

    def is_top(self, employee_id: str) -> bool:
        return any(n.employee.id == employee_id for n in self.top_nominees)

    def to_dict(self) -> Dict[str, Any]:
        """Shape consumed by the results pages and the winner emails"""
        nominees = []
        for stat in self.nominees:
            entry = stat.to_dict()
            entry["is_top"] = self.is_top(stat.employee.id)
            nominees.append(entry)

        return {
            "location_id": self.location.id,
            "name": self.location.name,
            "code": self.location.code,
            "total_votes": self.total_votes,
            "max_votes": self.max_votes,
            "is_tie": self.is_tie,
            "needs_tie_resolution": self.needs_tie_resolution,
            "top_nominees": [n.to_dict() for n in self.top_nominees],
            "nominees": nominees,
            "winner": self.official_winner.to_dict() if self.official_winner else None,
        }


def resolve_location(
    tally: CycleTally,
    location_id: str,
    winner_record: Optional[WinnerRecord],
    cycle_ended: bool,
) -> Optional[LocationResult]:
    """Resolve one location of the tally

    Returns:
        LocationResult, or None if the location is not part of the tally
    """
    summary = tally.location_summary(location_id)
    if summary is None:
        return None

    stats = tally.location_stats(location_id)
    max_votes = max((s.location_votes for s in stats), default=0)
    top = [s for s in stats if s.location_votes == max_votes] if max_votes > 0 else []
    is_tie = len(top) > 1

    official = None
    if winner_record is not None:
        # A record pointing at someone who is no longer a nominee yields no
        # winner; it does not fall back to the automatic rule.
        for stat in stats:
            if stat.employee.id == winner_record.employee_id:
                official = OfficialWinner(
                    stat=stat, is_auto=False, announced_at=winner_record.announced_at
                )
                break
    elif cycle_ended and len(top) == 1:
        official = OfficialWinner(stat=top[0], is_auto=True)

    return LocationResult(
        location=summary.location,
        total_votes=summary.total_nominee_votes,
        max_votes=max_votes,
        nominees=sorted(stats, key=lambda s: s.location_votes, reverse=True),
        top_nominees=top,
        is_tie=is_tie,
        official_winner=official,
        needs_tie_resolution=cycle_ended and is_tie and winner_record is None,
    )


def resolve_cycle(
    tally: CycleTally,
    winners: Sequence[WinnerRecord],
    cycle_ended: bool,
) -> List[LocationResult]:
    """Resolve every location, in cycle location order"""
    by_location = {w.location_id: w for w in winners}
    results = []
    for summary in tally.locations:
        loc_id = summary.location.id
        result = resolve_location(tally, loc_id, by_location.get(loc_id), cycle_ended)
        if result is not None:
            results.append(result)
    return results


def has_unresolved_tie(results: Sequence[LocationResult]) -> bool:
    """True when an ended cycle has a tied location with no announced winner"""
    return any(r.needs_tie_resolution for r in results)


class AnnouncementCode(str, Enum):
    OK = "ok"
    NOT_ENDED = "not_ended"
    UNKNOWN_LOCATION = "unknown_location"
    UNKNOWN_NOMINEE = "unknown_nominee"
    NO_VOTES = "no_votes"
    NO_TIE = "no_tie"
    NOT_TOP_NOMINEE = "not_top_nominee"


_ANNOUNCEMENT_MESSAGES = {
    AnnouncementCode.OK: "Winner can be announced",
    AnnouncementCode.NOT_ENDED: "Winner can only be announced after the voting cycle has ended",
    AnnouncementCode.UNKNOWN_LOCATION: "Location is not part of this cycle",
    AnnouncementCode.UNKNOWN_NOMINEE: "Nominee is not part of this cycle",
    AnnouncementCode.NO_VOTES: "No votes have been cast in this store",
    AnnouncementCode.NO_TIE: "Manual winner selection is only allowed when there is a tie in this store",
    AnnouncementCode.NOT_TOP_NOMINEE: "Only nominees with the highest votes in this store can be selected as winner",
}


@dataclass(frozen=True)
class AnnouncementCheck:
    code: AnnouncementCode
    result: Optional[LocationResult] = None

    @property
    def ok(self) -> bool:
        return self.code is AnnouncementCode.OK

    @property
    def reason(self) -> str:
        return _ANNOUNCEMENT_MESSAGES[self.code]


def check_announcement(
    snapshot: CycleSnapshot,
    tally: CycleTally,
    location_id: str,
    nominee_id: str,
    now: datetime,
) -> AnnouncementCheck:
    """Decide whether a manual winner announcement is allowed

    Manual announcement is only a tie-break: it is refused for a single
    leader even if the target is that leader.
    """
    cycle = snapshot.cycle

    if not has_ended(cycle, now):
        return AnnouncementCheck(AnnouncementCode.NOT_ENDED)

    if not cycle.has_location(location_id) or tally.location_summary(location_id) is None:
        return AnnouncementCheck(AnnouncementCode.UNKNOWN_LOCATION)

    if not cycle.has_nominee(nominee_id) or tally.nominee(nominee_id) is None:
        return AnnouncementCheck(AnnouncementCode.UNKNOWN_NOMINEE)

    # Existing records are ignored here: a tie-break may be re-announced.
    result = resolve_location(tally, location_id, None, cycle_ended=True)

    if result.max_votes == 0:
        return AnnouncementCheck(AnnouncementCode.NO_VOTES, result)

    if not result.is_tie:
        return AnnouncementCheck(AnnouncementCode.NO_TIE, result)

    if not result.is_top(nominee_id):
        return AnnouncementCheck(AnnouncementCode.NOT_TOP_NOMINEE, result)

    return AnnouncementCheck(AnnouncementCode.OK, result)
