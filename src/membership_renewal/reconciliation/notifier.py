"""Renewal reminder composition and dispatch."""

import logging
from typing import Optional

from ..config import Settings
from ..connectors.base import EmailSenderBase
from ..records import MemberRecord, ReminderEmail
from .templates import ReminderTemplates

logger = logging.getLogger(__name__)

FRENCH = "fr"
ENGLISH = "en"


def normalize_name(value: str) -> str:
    """Capitalize each word and lowercase the rest: ``"jEAN-luc  PICARD"`` -> ``"Jean-luc Picard"``."""
    return " ".join(word.capitalize() for word in value.split())


def select_locale(member: MemberRecord, french_language_id: int) -> str:
    """French for French speakers or members based in France, English otherwise."""
    if french_language_id in member.preferred_languages:
        return FRENCH
    if member.country == "France":
        return FRENCH
    return ENGLISH


class ReminderNotifier:
    """Compose bilingual renewal reminders and hand them to an email sender."""

    def __init__(
        self,
        settings: Settings,
        sender: EmailSenderBase,
        templates: Optional[ReminderTemplates] = None,
    ):
        """Initialize the notifier.

        Args:
            settings: Application settings (sender identity, allowlist, option ids).
            sender: Transport used to deliver the emails.
            templates: Template renderer. Defaults to the packaged templates.
        """
        self.settings = settings
        self.sender = sender
        self.templates = templates or ReminderTemplates()

    def compose(self, member: MemberRecord) -> ReminderEmail:
        """Render the reminder a member should receive."""
        locale = select_locale(member, self.settings.french_language_id)
        first_name = normalize_name(member.first_name)
        rendered = self.templates.render(
            locale=locale,
            first_name=first_name,
            organization=self.settings.sender_name,
            renewal_link=self.settings.renewal_link(locale),
        )
        return ReminderEmail(
            sender_name=self.settings.sender_name,
            sender_email=self.settings.sender_email,
            to_email=member.email,
            to_name=f"{first_name} {member.surname}",
            subject=rendered.subject,
            html_content=rendered.html,
            text_content=rendered.text,
            locale=locale,
        )

    def is_allowed(self, member: MemberRecord) -> bool:
        """Whether the allowlist, if any, lets this member be emailed."""
        allowlist = self.settings.reminder_allowlist
        if not allowlist:
            return True
        return any(email.lower() in allowlist for email in member.emails())

    def notify(self, member: MemberRecord) -> bool:
        """Send the renewal reminder to a member.

        Returns:
            True if the email was accepted by the sender, False if the
            allowlist held it back.

        Raises:
            ConnectorError: If the sender fails.
        """
        email = self.compose(member)
        if not self.is_allowed(member):
            logger.info(
                f"Skipping email notification to {member.email} (not in allowlist): {email.subject}"
            )
            return False
        self.sender.send(email)
        return True
