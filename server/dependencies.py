"""FastAPI Dependencies

Centralized dependency injection for reuse across all route modules.
"""

from typing import Optional

from fastapi import Request

from database.db_postgres import Database
from notifications.emailer import EmailService


def get_db(request: Request) -> Database:
    """Dependency to get shared database instance from app state

    Usage in routes:
        @router.get("/endpoint")
        async def endpoint(db: Database = Depends(get_db)):
            cycles = await db.cycles.list_cycles()
            return cycles

    Tests swap app.state.db for an in-memory fake.
    """
    return request.app.state.db


def get_mailer(request: Request) -> Optional[EmailService]:
    """Email service from app state, None when Mailgun is not configured"""
    return getattr(request.app.state, "mailer", None)
