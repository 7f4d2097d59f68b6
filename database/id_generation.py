"""
ID Generation - identifier generation for voting entities

Single source of truth for ALL ID generation.

Entity ID Patterns:
- Location ID: loc_{12-char-sha256 of code} - e.g., "loc_3f2c1d4a9b0e"
- Employee ID: emp_{12-char-sha256 of employee code}
- Cycle ID: cyc_{random} - e.g., "cyc_Xk3v9QpL2m"
- Ballot ID: bal_{random}
- Invite ID: inv_{random}
- Invite token: 32 url-safe random characters

Directory IDs are deterministic so re-running the seed script never
duplicates a store or an employee. Cycle, ballot and invite IDs are random.
"""

import hashlib
import re
import secrets

_CODE_PATTERN = re.compile(r"\s+")


def normalize_code(code: str) -> str:
    """Normalize a human-entered code for hashing and lookups

    Examples:
        >>> normalize_code("  st 01 ")
        'ST01'
    """
    return _CODE_PATTERN.sub("", code or "").upper()


def _hash_code(code: str) -> str:
    normalized = normalize_code(code)
    if not normalized:
        raise ValueError("Code is required for ID generation")
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]


def generate_location_id(code: str) -> str:
    """Deterministic location ID from the store code"""
    return f"loc_{_hash_code(code)}"


def generate_employee_id(employee_code: str) -> str:
    """Deterministic employee ID from the badge code"""
    return f"emp_{_hash_code(employee_code)}"


def generate_cycle_id() -> str:
    return f"cyc_{secrets.token_urlsafe(8)}"


def generate_ballot_id() -> str:
    return f"bal_{secrets.token_urlsafe(12)}"


def generate_invite_id() -> str:
    return f"inv_{secrets.token_urlsafe(8)}"


def generate_invite_token() -> str:
    """Unguessable single-use token embedded in invite links"""
    return secrets.token_urlsafe(24)
