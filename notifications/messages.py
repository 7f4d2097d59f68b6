"""
Voting email messages

Builds subject, HTML and plain-text bodies for the two emails the system
sends. Winner summaries consume the per-location dicts produced by
LocationResult.to_dict() as-is.
"""

from dataclasses import dataclass
from html import escape
from typing import Any, Dict, List, Optional, Sequence

from database.models import Employee
from notifications.templates import (
    congrats_block,
    email_wrapper_end,
    email_wrapper_start,
    footer_section,
    header_section,
    nominee_preview_block,
    results_table,
    simple_button,
    text_content,
)

NO_VOTES_TEXT = "No votes were cast"
PENDING_TEXT = "Winner not announced yet (tie / pending)"


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str
    text: str


def _person_label(first_name: str, last_name: str, code: str) -> str:
    return f"{first_name} {last_name} ({code})".strip()


def nominee_preview(nominees: Sequence[Employee], limit: int) -> tuple:
    """First `limit` nominee labels plus how many were left out"""
    shown = [_person_label(n.first_name, n.last_name, n.employee_code) for n in nominees[:limit]]
    return shown, max(len(nominees) - len(shown), 0)


def render_invite_email(
    org_name: str,
    cycle_name: str,
    voter: Employee,
    nominees: Sequence[Employee],
    link: str,
    preview_size: int = 3,
) -> EmailMessage:
    """Invite with a single-use voting link

    The nominee list comes before the button.
    """
    names, remaining = nominee_preview(nominees, preview_size)
    voter_name = escape(voter.full_name)
    cycle = escape(cycle_name)

    html = "".join(
        [
            email_wrapper_start(f"Voting invite: {cycle}"),
            header_section(escape(org_name), "Employee of the Cycle", "Secure voting link"),
            text_content(f"Hi <strong>{voter_name}</strong>,", color="#111827"),
            text_content(f"You have been invited to vote in <strong>{cycle}</strong>."),
            nominee_preview_block([escape(n) for n in names], remaining),
            text_content(
                "Please use the button below to cast your vote. This link can be used "
                "<strong>only once</strong>, and it is unique to you.",
                size=13,
            ),
            simple_button(link, "Open voting page"),
            text_content("If you did not expect this email, you can safely ignore it.", color="#9ca3af", size=11),
            footer_section(escape(org_name)),
            email_wrapper_end(),
        ]
    )

    lines = [f"Hi {voter.full_name},", "", f"You have been invited to vote in {cycle_name}.", ""]
    if names:
        lines.append("Nominees for this cycle:")
        lines.extend(f"  - {name}" for name in names)
        if remaining > 0:
            lines.append(f"  and {remaining} others")
        lines.append("")
    lines.extend(
        [
            "Open this link to cast your vote. It can be used only once and is unique to you:",
            link,
            "",
            "If you did not expect this email, you can safely ignore it.",
            "",
            "--",
            f"{org_name} Voting System - Internal use only",
        ]
    )

    return EmailMessage(
        subject=f"Voting invite: {cycle_name}",
        html=html,
        text="\n".join(lines),
    )


def winner_cell(location: Dict[str, Any]) -> tuple:
    """(text, is_placeholder) for one location row"""
    winner = location.get("winner")
    if not winner:
        if (location.get("total_votes") or 0) <= 0:
            return NO_VOTES_TEXT, True
        return PENDING_TEXT, True
    return _person_label(winner["first_name"], winner["last_name"], winner["employee_code"]), False


def winner_ids(locations: Sequence[Dict[str, Any]]) -> set:
    """Employee ids that won at least one of the given locations"""
    return {loc["winner"]["id"] for loc in locations if loc.get("winner")}


def render_winner_summary_email(
    org_name: str,
    cycle_name: str,
    recipient_name: Optional[str],
    locations: List[Dict[str, Any]],
    is_winner: bool,
    subject: Optional[str] = None,
) -> EmailMessage:
    """Per-store winner summary sent after a cycle ends"""
    name = (recipient_name or "").strip() or "there"
    cycle = escape(cycle_name)

    rows = []
    text_rows = []
    for loc in locations:
        store = f"{loc['name']} ({loc['code']})"
        cell, placeholder = winner_cell(loc)
        rows.append((escape(store), escape(cell) if placeholder else f"<strong>{escape(cell)}</strong>", placeholder))
        text_rows.append(f"  {store}: {cell}")

    html = "".join(
        [
            email_wrapper_start(f"Vote results: {cycle}"),
            header_section(escape(org_name), "Results Announced", cycle),
            text_content(f"Hi <strong>{escape(name)}</strong>,", color="#111827"),
            text_content(
                f"The voting cycle <strong>{cycle}</strong> has finished. "
                "Below is the winner summary for each store.",
                size=13,
            ),
            congrats_block() if is_winner else "",
            results_table(rows),
            text_content(
                "Thank you for taking part and supporting your team. Keep up the great work!",
                color="#6b7280",
                size=12,
            ),
            footer_section(escape(org_name)),
            email_wrapper_end(),
        ]
    )

    lines = [f"Hi {name},", "", f"The voting cycle {cycle_name} has finished.", ""]
    if is_winner:
        lines.extend(["Congratulations! You are listed as a winner in this cycle for at least one store.", ""])
    lines.append("Winners by store:")
    lines.extend(text_rows)
    lines.extend(["", "Thank you for taking part and supporting your team.", "", "--", f"{org_name} Voting System - Internal use only"])

    return EmailMessage(
        subject=subject or f"Vote results: {cycle_name}",
        html=html,
        text="\n".join(lines),
    )
