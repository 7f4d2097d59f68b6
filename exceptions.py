"""
Custom Exception Hierarchy - Domain-specific error types

Provides clear, typed exceptions for the failure modes of the voting API.
All custom exceptions inherit from CycleVoteError for easy catching.

The API layer maps each family to one HTTP status (see server/main.py):
- ValidationError   -> 400
- EligibilityError  -> 403
- NotFoundError     -> 404
- ConflictError     -> 409
- anything else     -> 500
"""

from typing import Optional, Dict, Any


class CycleVoteError(Exception):
    """Base exception for all cyclevote errors

    Carries a context dict so handlers can log structured fields
    without parsing the message.
    """

    status_code: int = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self):
        base_msg = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


# ========== Database Errors ==========


class DatabaseError(CycleVoteError):
    """Database operation failures

    Examples:
    - Query errors
    - Transaction rollbacks
    """
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to establish or maintain database connection"""
    pass


# ========== Request Errors ==========


class ValidationError(CycleVoteError):
    """Malformed or out-of-constraint input

    Examples:
    - Missing required field
    - End time not after start time
    - Too many nominees selected
    - Voting window closed
    """

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        self.field = field
        self.value = value

        context = {}
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)

        super().__init__(message, context)


class EligibilityError(CycleVoteError):
    """Caller is not allowed to take part in this cycle

    Examples:
    - Employee is not one of the cycle's voters
    """

    status_code = 403

    def __init__(self, message: str, cycle_id: Optional[str] = None, employee_id: Optional[str] = None):
        self.cycle_id = cycle_id
        self.employee_id = employee_id

        context = {}
        if cycle_id:
            context['cycle_id'] = cycle_id
        if employee_id:
            context['employee_id'] = employee_id

        super().__init__(message, context)


class ConflictError(CycleVoteError):
    """Request collides with existing state

    Examples:
    - Second ballot for the same (cycle, voter)
    - Duplicate location or employee code
    """

    status_code = 409


class NotFoundError(CycleVoteError):
    """Referenced entity does not exist"""

    status_code = 404

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[str] = None):
        self.entity = entity
        self.entity_id = entity_id

        context = {}
        if entity:
            context['entity'] = entity
        if entity_id:
            context['entity_id'] = entity_id

        super().__init__(message, context)


# ========== Configuration Errors ==========


class ConfigurationError(CycleVoteError):
    """Configuration or environment errors

    Examples:
    - Missing Mailgun credentials
    - Invalid configuration value
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        context = {}
        if config_key:
            context['config_key'] = config_key
        super().__init__(message, context)
