"""Notifications module - voting invites and winner summaries by email"""

from notifications.emailer import EmailService
from notifications.messages import EmailMessage, render_invite_email, render_winner_summary_email

__all__ = ["EmailMessage", "EmailService", "render_invite_email", "render_winner_summary_email"]
