"""Notification API routes - invite links and winner summary emails."""

from typing import Optional

from fastapi import APIRouter, Depends

from database.db_postgres import Database
from notifications.emailer import EmailService
from server.dependencies import get_db, get_mailer
from server.models.requests import NotifyLocationRequest, SendInvitesRequest
from server.services import notifications as notification_service
from server.utils.responses import success_response

router = APIRouter(prefix="/api/cycles")


@router.post("/{cycle_id}/send-invites")
async def send_invites(
    cycle_id: str,
    request: Optional[SendInvitesRequest] = None,
    db: Database = Depends(get_db),
    mailer: Optional[EmailService] = Depends(get_mailer),
):
    """Email single-use voting links to all voters or a selected subset."""
    request = request or SendInvitesRequest()
    summary = await notification_service.send_vote_invites(
        db, mailer, cycle_id, request.send_mode, request.selected_employee_ids
    )
    return success_response(summary)


@router.post("/{cycle_id}/notify-winners")
async def notify_winners(
    cycle_id: str,
    db: Database = Depends(get_db),
    mailer: Optional[EmailService] = Depends(get_mailer),
):
    """Send the all-store winner summary to every voter and nominee."""
    summary = await notification_service.notify_winners(db, mailer, cycle_id)
    return success_response(summary)


@router.post("/{cycle_id}/notify-location-winner")
async def notify_location_winner(
    cycle_id: str,
    request: NotifyLocationRequest,
    db: Database = Depends(get_db),
    mailer: Optional[EmailService] = Depends(get_mailer),
):
    summary = await notification_service.notify_location_winner(
        db, mailer, cycle_id, request.location_id
    )
    return success_response(summary)
