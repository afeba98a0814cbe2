"""Models for membership payment reconciliation."""

import enum
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, Field

from ..records import MemberRecord, PaymentRecord, ReminderEmail


class Action(str, enum.Enum):
    """Decision taken for a member matched to a payment."""
    NEEDS_REMINDER = "needs_reminder"
    NEEDS_STATUS_UPDATE = "needs_status_update"
    NO_ACTION = "no_action"


class RunStatus(str, enum.Enum):
    """Status of a renewal run."""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class MatchedPair(BaseModel):
    """A member joined with its most recent renewal payment."""
    member: MemberRecord
    payment: PaymentRecord


class ReconciliationPlan(BaseModel):
    """Outcome of matching and classifying payments against members."""
    reminders: List[MatchedPair] = Field(default_factory=list)
    status_updates: List[MatchedPair] = Field(default_factory=list)
    no_action: List[MatchedPair] = Field(default_factory=list)
    unmatched_payments: List[PaymentRecord] = Field(default_factory=list)

    @property
    def matched_count(self) -> int:
        return len(self.reminders) + len(self.status_updates) + len(self.no_action)


class RunStats(BaseModel):
    """Set-difference counts computed after a run."""
    members_without_payment: int = Field(default=0)
    members_without_payment_by_type: Dict[int, int] = Field(default_factory=dict)
    individual_members_without_payment: int = Field(default=0)
    organization_members_without_payment: int = Field(default=0)
    payments_without_member: int = Field(default=0)


class RunReport(BaseModel):
    """Complete report of a renewal run."""
    status: RunStatus = Field(default=RunStatus.IN_PROGRESS)
    dry_run: bool = Field(default=False)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = Field(None, description="Time when the run ended")

    # Fetch statistics
    total_payments: int = Field(default=0)
    renewal_payments: int = Field(default=0)
    unique_payers: int = Field(default=0)
    total_members: int = Field(default=0)
    total_matched: int = Field(default=0)

    # Actions
    reminders_needed: int = Field(default=0)
    reminders_sent: int = Field(default=0)
    reminders_skipped: int = Field(default=0)
    reminders_suppressed: int = Field(default=0)
    status_updates: int = Field(default=0)
    members_updated: int = Field(default=0)
    send_failures: int = Field(default=0)
    update_failures: int = Field(default=0)

    stats: RunStats = Field(default_factory=RunStats)

    error_message: Optional[str] = Field(None, description="Error message if the run failed")

    @property
    def has_failures(self) -> bool:
        return self.send_failures > 0 or self.update_failures > 0

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return the report as plain JSON-compatible data."""
        return {
            "status": self.status.value,
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "fetch": {
                "total_payments": self.total_payments,
                "renewal_payments": self.renewal_payments,
                "unique_payers": self.unique_payers,
                "total_members": self.total_members,
                "total_matched": self.total_matched,
            },
            "actions": {
                "reminders_needed": self.reminders_needed,
                "reminders_sent": self.reminders_sent,
                "reminders_skipped": self.reminders_skipped,
                "reminders_suppressed": self.reminders_suppressed,
                "status_updates": self.status_updates,
                "members_updated": self.members_updated,
                "send_failures": self.send_failures,
                "update_failures": self.update_failures,
            },
            "statistics": {
                "members_without_payment": self.stats.members_without_payment,
                "members_without_payment_by_type": {
                    str(k): v for k, v in self.stats.members_without_payment_by_type.items()
                },
                "individual_members_without_payment": self.stats.individual_members_without_payment,
                "organization_members_without_payment": self.stats.organization_members_without_payment,
                "payments_without_member": self.stats.payments_without_member,
            },
            "error_message": self.error_message,
        }
