"""In-memory connectors for dry runs and tests without real service calls."""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional

from ..records import MemberRecord, PaymentRecord, ReminderEmail
from .base import ConnectorError, EmailSenderBase, MemberStoreBase, PaymentSourceBase

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Failure injection for the simulated services."""
    fail_fetch: bool = False  # fetch_payments / list_members raise
    fail_send_to: FrozenSet[str] = field(default_factory=frozenset)  # recipient addresses
    fail_update_ids: FrozenSet[int] = field(default_factory=frozenset)  # member row ids


class InMemoryPaymentSource(PaymentSourceBase):
    """Payment source serving a fixed list of payments."""

    def __init__(self, payments: Optional[List[PaymentRecord]] = None, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self._payments = list(payments or [])

    def fetch_payments(self) -> List[PaymentRecord]:
        if self.config.fail_fetch:
            raise ConnectorError("simulator", "simulated payment fetch failure")
        return list(self._payments)


class InMemoryMemberStore(MemberStoreBase):
    """
    Member store keeping rows in a dictionary keyed by id.

    Updates overwrite the stored row and are also appended to ``updates``
    so callers can inspect the write sequence.
    """

    def __init__(self, members: Optional[List[MemberRecord]] = None, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self._members: Dict[int, MemberRecord] = {m.id: m for m in members or []}
        self.updates: List[MemberRecord] = []

    def list_members(self) -> List[MemberRecord]:
        if self.config.fail_fetch:
            raise ConnectorError("simulator", "simulated member fetch failure")
        return [m.model_copy(deep=True) for m in self._members.values()]

    def update_member(self, member: MemberRecord) -> None:
        if member.id in self.config.fail_update_ids:
            raise ConnectorError("simulator", f"simulated update failure for member {member.id}", status_code=500)
        stored = member.model_copy(deep=True)
        self._members[member.id] = stored
        self.updates.append(stored)

    def get_member(self, member_id: int) -> Optional[MemberRecord]:
        """Get a stored member (for testing)."""
        return self._members.get(member_id)


class DryRunMemberStore(MemberStoreBase):
    """Read through to a real store, but only record writes."""

    def __init__(self, store: MemberStoreBase):
        self._store = store
        self.updates: List[MemberRecord] = []

    def list_members(self) -> List[MemberRecord]:
        return self._store.list_members()

    def update_member(self, member: MemberRecord) -> None:
        logger.info(
            f"[dry-run] Would update member {member.id} ({member.email}): "
            f"active={member.active_membership}, "
            f"last_payment_date={member.last_payment_date}, "
            f"last_contribution_email_date={member.last_contribution_email_date}, "
            f"contribution_email_count={member.contribution_email_count}"
        )
        self.updates.append(member.model_copy(deep=True))


class RecordingEmailSender(EmailSenderBase):
    """Email sender that keeps messages instead of delivering them."""

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self.sent: List[ReminderEmail] = []

    def send(self, email: ReminderEmail) -> None:
        if email.to_email in self.config.fail_send_to:
            raise ConnectorError("simulator", f"simulated send failure to {email.to_email}", status_code=502)
        logger.info(f"[simulator] Email to {email.to_email}: {email.subject}")
        self.sent.append(email)

    def clear(self) -> None:
        """Forget recorded emails (for test cleanup)."""
        self.sent.clear()
