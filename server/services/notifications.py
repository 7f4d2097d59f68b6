"""
Notification service layer

Sends invite links before and during a cycle and winner summaries after it
ends. Delivery is best-effort per recipient: each send is tallied as a
success or failure and the dispatch carries on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from config import config, get_logger
from database.db_postgres import Database
from database.id_generation import generate_invite_token
from database.models import Employee, VotingCycle
from exceptions import ConfigurationError, ValidationError
from notifications.emailer import EmailService
from notifications.messages import (
    EmailMessage,
    render_invite_email,
    render_winner_summary_email,
    winner_ids,
)
from server.metrics import metrics
from server.services.results import resolve_results
from server.utils.validation import require_cycle
from voting.lifecycle import has_ended, utcnow

logger = get_logger(__name__).bind(component="notification_service")

MISSING_EMAIL = "Missing email address"
DELIVERY_FAILED = "Email delivery failed"


@dataclass
class DispatchSummary:
    """Outcome of one bulk email run"""

    total: int = 0
    success_count: int = 0
    failure_count: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    def fail(self, person: Employee, reason: str) -> None:
        self.failure_count += 1
        entry = {"employee_code": person.employee_code, "reason": reason}
        if person.email:
            entry["email"] = person.email
        self.errors.append(entry)

    def to_dict(self, total_key: str) -> Dict[str, Any]:
        return {
            total_key: self.total,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "errors": self.errors,
        }


def _require_mailer(mailer: Optional[EmailService]) -> EmailService:
    if mailer is None:
        raise ConfigurationError(
            "Email delivery is not configured", config_key="MAILGUN_API_KEY"
        )
    return mailer


def _has_email(person: Employee) -> bool:
    return bool(person.email and person.email.strip())


async def _deliver(
    mailer: EmailService,
    summary: DispatchSummary,
    person: Employee,
    message: EmailMessage,
    kind: str,
) -> bool:
    sent = await mailer.send_email(
        to_email=person.email.strip(),
        subject=message.subject,
        html_body=message.html,
        text_body=message.text,
    )
    metrics.record_email(kind, sent)
    if sent:
        summary.success_count += 1
    else:
        summary.fail(person, DELIVERY_FAILED)
    return sent


def invite_link(cycle_id: str, token: str) -> str:
    return f"{config.FRONTEND_URL.rstrip('/')}/vote/{cycle_id}/invite/{token}"


async def send_vote_invites(
    db: Database,
    mailer: Optional[EmailService],
    cycle_id: str,
    send_mode: str = "all",
    selected_ids: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Email a fresh single-use link to every targeted voter

    Re-sending rotates the voter's token, so older links stop working.

    Raises:
        NotFoundError: Unknown cycle
        ValidationError: No voters, cycle already ended, or bad selection
        ConfigurationError: No mailer configured
    """
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)

    if not cycle.voter_ids:
        raise ValidationError("No voters assigned to this cycle", field="voter_ids")
    if has_ended(cycle, now):
        raise ValidationError("Cannot send invites because voting has already ended")

    target_ids = list(cycle.voter_ids)
    if send_mode == "selected":
        selected = {str(i).strip() for i in selected_ids or []}
        if not selected:
            raise ValidationError("No employees selected for invite", field="selected_employee_ids")
        target_ids = [i for i in cycle.voter_ids if i in selected]
        if not target_ids:
            raise ValidationError(
                "Selected employees are not voters in this cycle", field="selected_employee_ids"
            )

    mailer = _require_mailer(mailer)

    voters = await db.directory.get_employees_batch(target_ids)
    nominees_map = await db.directory.get_employees_batch(cycle.nominee_ids)
    nominees = [nominees_map[i] for i in cycle.nominee_ids if i in nominees_map]

    targets = [voters[i] for i in target_ids if i in voters]
    summary = DispatchSummary(total=len(targets))

    for voter in targets:
        if not _has_email(voter):
            metrics.emails_sent.labels(kind="invite", status="skipped").inc()
            summary.fail(voter, MISSING_EMAIL)
            continue

        invite = await db.invites.upsert_invite(cycle.id, voter.id, generate_invite_token())
        message = render_invite_email(
            org_name=config.ORG_NAME,
            cycle_name=cycle.name,
            voter=voter,
            nominees=nominees,
            link=invite_link(cycle.id, invite.token),
            preview_size=config.INVITE_NOMINEE_PREVIEW,
        )

        if await _deliver(mailer, summary, voter, message, kind="invite"):
            logger.info("invite sent", cycle_id=cycle.id, employee_id=voter.id)

    logger.info(
        "invite dispatch finished",
        cycle_id=cycle.id,
        send_mode=send_mode,
        total=summary.total,
        sent=summary.success_count,
        failed=summary.failure_count,
    )

    result = summary.to_dict("total_voters")
    result["message"] = "Invite emails processed for this cycle"
    return result


def _require_ended(cycle: VotingCycle, now: datetime) -> None:
    if not has_ended(cycle, now):
        raise ValidationError("Winner summary can only be sent after the voting cycle has ended")


async def _send_summaries(
    mailer: EmailService,
    cycle: VotingCycle,
    recipients: Sequence[Employee],
    locations: List[Dict[str, Any]],
    subject: str,
) -> DispatchSummary:
    winners = winner_ids(locations)
    summary = DispatchSummary(total=len(recipients))

    for person in recipients:
        if not _has_email(person):
            metrics.emails_sent.labels(kind="winner_summary", status="skipped").inc()
            summary.fail(person, MISSING_EMAIL)
            continue

        message = render_winner_summary_email(
            org_name=config.ORG_NAME,
            cycle_name=cycle.name,
            recipient_name=person.full_name,
            locations=locations,
            is_winner=person.id in winners,
            subject=subject,
        )
        await _deliver(mailer, summary, person, message, kind="winner_summary")

    return summary


def _participant_ids(cycle: VotingCycle) -> List[str]:
    """Voters then nominees, de-duplicated"""
    return list(dict.fromkeys([*cycle.voter_ids, *cycle.nominee_ids]))


async def notify_winners(
    db: Database,
    mailer: Optional[EmailService],
    cycle_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Send the all-store winner summary to every voter and nominee"""
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    _require_ended(cycle, now)

    if not cycle.voter_ids:
        raise ValidationError("No voters configured for this cycle", field="voter_ids")

    people = await db.directory.get_employees_batch(_participant_ids(cycle))
    recipients = [people[i] for i in _participant_ids(cycle) if i in people]
    if not recipients:
        raise ValidationError("No employees found to notify for this cycle")

    mailer = _require_mailer(mailer)

    _, results = await resolve_results(db, cycle, cycle_ended=True)
    locations = [r.to_dict() for r in results]

    summary = await _send_summaries(
        mailer, cycle, recipients, locations, subject=f"Vote results: {cycle.name}"
    )
    await db.cycles.mark_results_notified(cycle.id, now)

    logger.info(
        "winner summary sent",
        cycle_id=cycle.id,
        total=summary.total,
        sent=summary.success_count,
        failed=summary.failure_count,
    )

    result = summary.to_dict("total_recipients")
    result["message"] = "Winner summary emails processed for this cycle"
    return result


async def notify_location_winner(
    db: Database,
    mailer: Optional[EmailService],
    cycle_id: str,
    location_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Send one store's result to the cycle participants assigned to it"""
    now = now or utcnow()
    cycle = await require_cycle(db, cycle_id)
    _require_ended(cycle, now)

    if not cycle.has_location(location_id):
        raise ValidationError(
            "Location is not part of this cycle", field="location_id", value=location_id
        )

    people = await db.directory.get_employees_batch(_participant_ids(cycle))
    recipients = [
        people[i]
        for i in _participant_ids(cycle)
        if i in people and location_id in people[i].location_ids
    ]
    if not recipients:
        raise ValidationError("No employees found for this store in this cycle")

    mailer = _require_mailer(mailer)

    _, results = await resolve_results(db, cycle, cycle_ended=True)
    store = next((r for r in results if r.location_id == location_id), None)
    if store is None:
        raise ValidationError(
            "Location is not part of this cycle", field="location_id", value=location_id
        )

    summary = await _send_summaries(
        mailer,
        cycle,
        recipients,
        [store.to_dict()],
        subject=f"Vote results ({store.location.code}): {cycle.name}",
    )

    logger.info(
        "store winner summary sent",
        cycle_id=cycle.id,
        location_id=location_id,
        total=summary.total,
        sent=summary.success_count,
        failed=summary.failure_count,
    )

    result = summary.to_dict("total_recipients")
    result["message"] = (
        f"Store winner notification processed for {store.location.name} ({store.location.code})"
    )
    result["location"] = store.location.to_dict()
    return result
