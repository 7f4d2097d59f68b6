"""Existence checks shared by the service layer."""

from database.models import Employee, VotingCycle
from exceptions import NotFoundError


async def require_cycle(db, cycle_id: str) -> VotingCycle:
    """Get cycle or raise 404."""
    cycle = await db.cycles.get_cycle(cycle_id)
    if not cycle:
        raise NotFoundError("Cycle not found", entity="cycle", entity_id=cycle_id)
    return cycle


async def require_employee_by_code(db, employee_code: str) -> Employee:
    """Get employee by badge code or raise 404."""
    employee = await db.directory.get_employee_by_code(employee_code)
    if not employee:
        raise NotFoundError("Employee ID not found", entity="employee", entity_id=employee_code)
    return employee
