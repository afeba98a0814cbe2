"""Locale-keyed renewal reminder templates."""

import logging
from pathlib import Path
from typing import Dict, NamedTuple, Optional

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

SUBJECTS: Dict[str, str] = {
    "fr": "Il est temps de renouveler votre adhésion à {{ organization }}",
    "en": "It's time to renew your {{ organization }} membership",
}


class RenderedReminder(NamedTuple):
    subject: str
    html: str
    text: str


class ReminderTemplates:
    """Render the reminder subject and bodies for a locale."""

    def __init__(self, templates_path: Optional[Path] = None):
        self._templates_path = templates_path or Path(__file__).resolve().parent.parent / "templates"
        self._environment = Environment(
            loader=FileSystemLoader(self._templates_path),
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def locales(self):
        return tuple(SUBJECTS)

    def _resolve_locale(self, locale: str) -> str:
        if locale in SUBJECTS:
            return locale
        logger.warning(f"No reminder template for locale {locale!r}, using {DEFAULT_LOCALE!r}")
        return DEFAULT_LOCALE

    def _render_template(self, template_name: str, context: Dict[str, str]) -> str:
        try:
            template = self._environment.get_template(template_name)
        except TemplateNotFound as exc:  # pragma: no cover - packaging error
            raise RuntimeError(f"Email template '{template_name}' not found") from exc
        return template.render(**context)

    def render(
        self,
        locale: str,
        first_name: str,
        organization: str,
        renewal_link: str,
    ) -> RenderedReminder:
        """Render a reminder.

        Args:
            locale: Locale code ("fr" or "en"); anything else falls back to English.
            first_name: Recipient first name, already normalized.
            organization: Organization name shown in the message.
            renewal_link: Payment page the member should use to renew.

        Returns:
            RenderedReminder with subject, HTML body and plain-text body.
        """
        locale = self._resolve_locale(locale)
        context = {
            "first_name": first_name,
            "organization": organization,
            "renewal_link": renewal_link,
        }
        subject = self._environment.from_string(SUBJECTS[locale]).render(**context)
        return RenderedReminder(
            subject=subject,
            html=self._render_template(f"reminder_{locale}.html", context),
            text=self._render_template(f"reminder_{locale}.txt", context),
        )
