"""
Pydantic request models for API validation
"""

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, field_validator, model_validator

from voting.lifecycle import normalize_id_list


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _as_id_list(value: Any) -> List[str]:
    """Accept a single id or a list of ids"""
    if value is None:
        return []
    if isinstance(value, (str, int)):
        value = [value]
    return normalize_id_list(str(v) for v in value)


class CycleRequest(BaseModel):
    """Full cycle definition; used for both create and update"""

    name: str
    location_ids: List[str]
    start_at: datetime
    end_at: datetime
    voter_ids: List[str]
    nominee_ids: List[str]
    vote_points: int = 1
    max_votes_per_voter: int = 1

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Cycle name cannot be empty")
        if len(v) > 200:
            raise ValueError("Cycle name too long (max 200 characters)")
        return v

    @field_validator("location_ids", "voter_ids", "nominee_ids", mode="before")
    @classmethod
    def validate_id_lists(cls, v: Any) -> List[str]:
        ids = _as_id_list(v)
        if not ids:
            raise ValueError("At least one location, one voter and one nominee must be selected")
        return ids

    @field_validator("start_at", "end_at")
    @classmethod
    def validate_timestamps(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @field_validator("vote_points")
    @classmethod
    def validate_vote_points(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Vote points must be a positive number")
        return v

    @field_validator("max_votes_per_voter")
    @classmethod
    def validate_max_votes(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max votes per voter must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_window(self) -> "CycleRequest":
        if self.end_at <= self.start_at:
            raise ValueError("End time must be after start time")
        return self


class AnnounceWinnerRequest(BaseModel):
    location_id: str
    nominee_id: str

    @field_validator("location_id", "nominee_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("location_id and nominee_id are required")
        return v


class CheckEmployeeRequest(BaseModel):
    employee_code: str

    @field_validator("employee_code")
    @classmethod
    def validate_employee_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Employee ID is required")
        return v


class CastBallotRequest(CheckEmployeeRequest):
    nominee_ids: List[str] = []

    @field_validator("nominee_ids", mode="before")
    @classmethod
    def validate_nominee_ids(cls, v: Any) -> List[str]:
        # Emptiness is an eligibility rule, checked with the rest of them
        return _as_id_list(v)


class InviteCastRequest(BaseModel):
    nominee_ids: List[str] = []

    @field_validator("nominee_ids", mode="before")
    @classmethod
    def validate_nominee_ids(cls, v: Any) -> List[str]:
        return _as_id_list(v)


class SendInvitesRequest(BaseModel):
    send_mode: Literal["all", "selected"] = "all"
    selected_employee_ids: Optional[List[str]] = None

    @field_validator("selected_employee_ids", mode="before")
    @classmethod
    def validate_selected(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        return _as_id_list(v)

    @model_validator(mode="after")
    def validate_selection(self) -> "SendInvitesRequest":
        if self.send_mode == "selected" and not self.selected_employee_ids:
            raise ValueError("No employees selected for invite")
        return self


class NotifyLocationRequest(BaseModel):
    location_id: str

    @field_validator("location_id")
    @classmethod
    def validate_location_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("location_id is required")
        return v
