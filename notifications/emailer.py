"""
Async email delivery service using Mailgun API.

Used for:
- Voting invite links
- Winner summaries (whole cycle or one store)
"""

import httpx
from typing import Optional

from config import config, get_logger
from exceptions import ConfigurationError

logger = get_logger(__name__).bind(component="emailer")


class EmailService:
    """Async email service using Mailgun API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        domain: Optional[str] = None,
        from_email: Optional[str] = None,
        timeout: float = 10,
    ):
        api_key = api_key or config.MAILGUN_API_KEY
        domain = domain or config.MAILGUN_DOMAIN
        if not api_key or not domain:
            raise ConfigurationError(
                "Mailgun configuration missing (MAILGUN_API_KEY, MAILGUN_DOMAIN)",
                config_key="MAILGUN_API_KEY",
            )
        self.api_key = api_key
        self.api_url = f"https://api.mailgun.net/v3/{domain}/messages"
        self.from_email = from_email or config.MAILGUN_FROM_EMAIL or f"voting@{domain}"
        self.timeout = timeout

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        from_address: Optional[str] = None
    ) -> bool:
        """Send email via Mailgun API (async)

        Args:
            to_email: Recipient email address
            subject: Email subject line
            html_body: HTML content for email body
            text_body: Plain text alternative (defaults to html_body)
            from_address: Override sender (e.g., "Munchies Voting <voting@example.com>")

        Returns:
            True if sent successfully, False otherwise
        """
        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.api_url,
                    auth=("api", self.api_key),
                    data={
                        "from": from_address or f"{config.ORG_NAME} Voting <{self.from_email}>",
                        "to": to_email,
                        "subject": subject,
                        "html": html_body,
                        "text": text_body or html_body,
                    },
                    timeout=self.timeout
                )
                response.raise_for_status()
                logger.info("email sent", to=to_email, subject=subject[:50])
                return True
            except httpx.HTTPError as e:
                logger.error("email send failed", to=to_email, error=str(e))
                return False
