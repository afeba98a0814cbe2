"""Records exchanged with the payment source, member store and email sender."""

from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PaymentRecord(BaseModel):
    """A single payment fetched from the payment source."""
    order_form_slug: str = Field(..., description="Slug of the form the order was placed on")
    order_date: datetime = Field(..., description="Order date, timezone aware")
    payer_email: str = Field(..., description="Payer email address")
    payer_first_name: str = Field(default="")
    payer_last_name: str = Field(default="")

    model_config = {"frozen": True}

    @field_validator("order_date")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        # naive timestamps are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MemberRecord(BaseModel):
    """A row of the membership table."""
    id: int = Field(..., description="Row id in the member store")
    surname: str = Field(default="")
    first_name: str = Field(default="")
    email: str = Field(default="", description="Primary email")
    alternative_email_1: str = Field(default="")
    alternative_email_2: str = Field(default="")
    active_membership: bool = Field(default=False)
    last_payment_date: Optional[date] = Field(default=None)
    last_contribution_email_date: Optional[date] = Field(
        default=None, description="Day the last renewal reminder was sent"
    )
    contribution_email_count: int = Field(default=0, description="Reminders sent since last payment")
    membership_type: int = Field(default=0, description="Membership type option id")
    preferred_languages: List[int] = Field(default_factory=list)
    country: str = Field(default="")

    def emails(self) -> List[str]:
        """Primary and non-empty alternate emails, in that order."""
        return [
            e for e in (self.email, self.alternative_email_1, self.alternative_email_2) if e
        ]


class ReminderEmail(BaseModel):
    """A fully rendered renewal reminder ready to send."""
    sender_name: str
    sender_email: str
    to_email: str
    to_name: str
    subject: str
    html_content: str
    text_content: str
    locale: str = Field(default="en")
