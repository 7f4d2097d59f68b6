"""Standardized API response helpers.

All successful responses include {"success": True, ...}; errors raised as
CycleVoteError are rendered by the handler in server/main.py as
{"success": False, "message": ...}.
"""

from typing import Optional


def success_response(data: dict, **extras) -> dict:
    """Standard success response wrapper.

    Usage:
        return success_response({"cycle": cycle.to_dict()}, message="Cycle created")

    Returns:
        {"success": True, **data, **extras}
    """
    return {"success": True, **data, **extras}


def list_response(
    items: list,
    key: str = "items",
    total: Optional[int] = None,
    **extras
) -> dict:
    """Standard list response with total count.

    Usage:
        return list_response(cycles, key="cycles")

    Returns:
        {"success": True, key: items, "total": N, **extras}
    """
    return {
        "success": True,
        key: items,
        "total": total if total is not None else len(items),
        **extras
    }


def error_response(message: str, **extras) -> dict:
    """Standard error body.

    Returns:
        {"success": False, "message": message, **extras}
    """
    return {"success": False, "message": message, **extras}
