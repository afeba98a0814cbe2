"""Runtime configuration assembled once from the process environment."""

import os
import logging
from datetime import date
from typing import Dict, FrozenSet, List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(ValueError):
    """Raised when a required setting is missing or malformed."""


# env var -> Settings field
REQUIRED_VARIABLES: Dict[str, str] = {
    "HELLOASSO_API_ID": "helloasso_client_id",
    "HELLOASSO_API_SECRET": "helloasso_client_secret",
    "HELLOASSO_ORG_SLUG": "helloasso_org_slug",
    "HELLOASSO_FROM_DATE": "helloasso_from_date",
    "BASEROW_API_TOKEN": "baserow_api_token",
    "BASEROW_MEMBER_TABLE_ID": "baserow_table_id",
    "BREVO_API_KEY": "brevo_api_key",
}

OPTIONAL_VARIABLES: Dict[str, str] = {
    "HELLOASSO_BASE_URL": "helloasso_base_url",
    "HELLOASSO_FORM_SLUG_FR": "form_slug_fr",
    "HELLOASSO_FORM_SLUG_EN": "form_slug_en",
    "BASEROW_BASE_URL": "baserow_base_url",
    "BREVO_BASE_URL": "brevo_base_url",
    "SENDER_NAME": "sender_name",
    "SENDER_EMAIL": "sender_email",
    "REMINDER_ALLOWLIST": "reminder_allowlist",
    "FRENCH_LANGUAGE_ID": "french_language_id",
    "INDIVIDUAL_TYPE_ID": "individual_type_id",
    "ORGANIZATION_TYPE_ID": "organization_type_id",
    "LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Every external parameter the renewal job needs."""

    # Payment source
    helloasso_client_id: str = Field(..., min_length=1)
    helloasso_client_secret: str = Field(..., min_length=1)
    helloasso_org_slug: str = Field(..., min_length=1)
    helloasso_from_date: date = Field(..., description="Only payments from this day on are fetched")
    helloasso_base_url: str = Field(default="https://api.helloasso.com")
    form_slug_fr: str = Field(default="cotisation-annuelle", description="French renewal-fee form")
    form_slug_en: str = Field(default="annual-membership-fee", description="English renewal-fee form")

    # Member store
    baserow_api_token: str = Field(..., min_length=1)
    baserow_table_id: str = Field(..., min_length=1)
    baserow_base_url: str = Field(default="https://baserow.boavizta.org")

    # Email sender
    brevo_api_key: str = Field(..., min_length=1)
    brevo_base_url: str = Field(default="https://api.brevo.com")
    sender_name: str = Field(default="Boavizta")
    sender_email: str = Field(default="no-reply@boavizta.org")
    reminder_allowlist: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="When non-empty, only these addresses are actually emailed",
    )

    # Member table option ids
    french_language_id: int = Field(default=2591)
    individual_type_id: int = Field(default=2521)
    organization_type_id: int = Field(default=2520)

    log_level: str = Field(default="INFO")

    model_config = {"frozen": True}

    @field_validator("reminder_allowlist", mode="before")
    @classmethod
    def _split_allowlist(cls, value):
        if isinstance(value, str):
            return frozenset(
                item.strip().lower() for item in value.split(",") if item.strip()
            )
        return value

    @field_validator("helloasso_base_url", "baserow_base_url", "brevo_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def renewal_form_slugs(self) -> FrozenSet[str]:
        """Form slugs that identify a membership-fee payment."""
        return frozenset({self.form_slug_fr, self.form_slug_en})

    def renewal_link(self, locale: str) -> str:
        """Public payment page for the renewal form of a locale."""
        slug = self.form_slug_fr if locale == "fr" else self.form_slug_en
        return (
            f"https://www.helloasso.com/associations/"
            f"{self.helloasso_org_slug}/adhesions/{slug}"
        )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
            dotenv: If True and ``environ`` is not given, load a ``.env`` file
                into the process environment first.

        Returns:
            Validated Settings instance.

        Raises:
            ConfigurationError: If required variables are missing or a value
                cannot be parsed.
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        missing: List[str] = [
            name for name in REQUIRED_VARIABLES if not environ.get(name, "").strip()
        ]
        if missing:
            logger.error("Missing environment variables: %s", ", ".join(missing))
            raise ConfigurationError(
                f"{', '.join(missing)} environment variable(s) must be set"
            )

        values = {field: environ[name].strip() for name, field in REQUIRED_VARIABLES.items()}
        for name, field in OPTIONAL_VARIABLES.items():
            raw = environ.get(name)
            if raw is not None and raw.strip():
                values[field] = raw.strip()

        try:
            return cls(**values)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ConfigurationError(f"Invalid configuration value(s): {', '.join(fields)}") from e
