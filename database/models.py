"""
Database Models for cyclevote

Pydantic dataclasses with runtime validation for core entities.
"""

from typing import Optional, List
from datetime import datetime
from dataclasses import asdict, field
from pydantic.dataclasses import dataclass


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Location:
    """Store location from the directory"""

    id: str
    name: str
    code: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "code": self.code}


@dataclass
class Employee:
    """Employee from the directory

    employee_code is the human-facing badge number typed on the voting
    form; id is the internal key referenced by cycles and ballots.
    """

    id: str
    first_name: str
    last_name: str
    employee_code: str
    email: Optional[str] = None
    location_ids: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "employee_code": self.employee_code,
        }

    def to_contact_dict(self) -> dict:
        data = self.to_dict()
        data["email"] = self.email
        return data


@dataclass
class WinnerRecord:
    """Manually announced winner for one (cycle, location) pair

    Only tie-breaks are persisted. Single-leader winners are derived on read.
    """

    cycle_id: str
    location_id: str
    employee_id: str
    announced_at: datetime

    def to_dict(self) -> dict:
        return {
            "location_id": self.location_id,
            "employee_id": self.employee_id,
            "announced_at": _iso(self.announced_at),
        }


@dataclass
class VotingCycle:
    """One voting event

    location_ids keeps the administrator's ordering; results are reported
    in that order.
    """

    id: str
    name: str
    location_ids: List[str]
    start_at: datetime
    end_at: datetime
    voter_ids: List[str]
    nominee_ids: List[str]
    vote_points: int = 1
    max_votes_per_voter: int = 1
    winners: List[WinnerRecord] = field(default_factory=list)
    results_notified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def has_location(self, location_id: str) -> bool:
        return location_id in self.location_ids

    def has_voter(self, employee_id: str) -> bool:
        return employee_id in self.voter_ids

    def has_nominee(self, employee_id: str) -> bool:
        return employee_id in self.nominee_ids

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        data = asdict(self)
        data["start_at"] = _iso(self.start_at)
        data["end_at"] = _iso(self.end_at)
        data["results_notified_at"] = _iso(self.results_notified_at)
        data["created_at"] = _iso(self.created_at)
        data["updated_at"] = _iso(self.updated_at)
        data["winners"] = [w.to_dict() for w in self.winners]
        return data


@dataclass
class Ballot:
    """One voter's immutable submission for one cycle"""

    id: str
    cycle_id: str
    voter_id: str
    nominee_ids: List[str]
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cycle_id": self.cycle_id,
            "voter_id": self.voter_id,
            "nominee_ids": list(self.nominee_ids),
            "created_at": _iso(self.created_at),
        }


@dataclass
class VoteInvite:
    """Single-use voting link issued to one voter for one cycle"""

    id: str
    cycle_id: str
    employee_id: str
    token: str
    used: bool = False
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
