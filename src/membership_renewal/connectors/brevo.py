"""Brevo transactional email sender."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings
from ..records import ReminderEmail
from .base import ConnectorError, EmailSenderBase, check_response

logger = logging.getLogger(__name__)

SERVICE = "brevo"

# anything below 400 counts as accepted
SUCCESS_CODES = range(100, 400)


def build_request_body(email: ReminderEmail) -> Dict[str, Any]:
    return {
        "sender": {"name": email.sender_name, "email": email.sender_email},
        "to": [{"email": email.to_email, "name": email.to_name}],
        "subject": email.subject,
        "htmlContent": email.html_content,
        "textContent": email.text_content,
    }


class BrevoEmailSender(EmailSenderBase):
    """Send single-recipient emails through the Brevo SMTP API."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self._client = client or httpx.Client()

    def send(self, email: ReminderEmail) -> None:
        """Send an email.

        Raises:
            ConnectorError: If the request fails or Brevo answers with 4xx/5xx.
        """
        logger.info(f"Preparing to send email to {email.to_email}")
        try:
            response = self._client.post(
                f"{self.settings.brevo_base_url}/v3/smtp/email",
                headers={"api-key": self.settings.brevo_api_key},
                json=build_request_body(email),
            )
        except httpx.HTTPError as e:
            raise ConnectorError(SERVICE, f"send request failed: {e}") from e

        check_response(SERVICE, response, "send email", ok=SUCCESS_CODES)
        logger.info(f"Email sent successfully to {email.to_email}")

    def close(self) -> None:
        self._client.close()
