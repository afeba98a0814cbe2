"""Service layer running a full membership renewal pass."""

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from ..config import Settings
from ..connectors.base import (
    ConnectorError,
    EmailSenderBase,
    MemberStoreBase,
    PaymentSourceBase,
)
from ..records import MemberRecord
from .models import MatchedPair, RunReport, RunStatus
from .notifier import ReminderNotifier
from .reconciler import REMINDER_INTERVAL, Reconciler
from .reducer import filter_renewal_payments, latest_payment_per_payer
from .report import compute_stats, log_stats

logger = logging.getLogger(__name__)


def reminder_due(last_reminder: Optional[date], now: datetime) -> bool:
    """True when no reminder was sent in the last 14 days.

    The stored day is taken at midnight UTC.
    """
    if last_reminder is None:
        return True
    last_sent_at = datetime.combine(last_reminder, time.min, tzinfo=timezone.utc)
    return last_sent_at < now - REMINDER_INTERVAL


class RenewalService:
    """Fetch, reconcile, notify and persist in one sequential pass."""

    def __init__(
        self,
        settings: Settings,
        payment_source: PaymentSourceBase,
        member_store: MemberStoreBase,
        email_sender: Optional[EmailSenderBase] = None,
        notifier: Optional[ReminderNotifier] = None,
        reconciler: Optional[Reconciler] = None,
        dry_run: bool = False,
    ):
        """Initialize the renewal service.

        Args:
            settings: Application settings.
            payment_source: Where payments are fetched from.
            member_store: Where members are read from and written back to.
            email_sender: Transport for reminders. Ignored if ``notifier`` is given.
            notifier: Optional preconfigured notifier.
            reconciler: Optional reconciler instance.
            dry_run: Only used to label the report.
        """
        if notifier is None:
            if email_sender is None:
                raise ValueError("Either email_sender or notifier must be provided")
            notifier = ReminderNotifier(settings, email_sender)
        self.settings = settings
        self.payment_source = payment_source
        self.member_store = member_store
        self.notifier = notifier
        self.reconciler = reconciler or Reconciler()
        self.dry_run = dry_run

    def _persist(self, member: MemberRecord, report: RunReport) -> None:
        try:
            self.member_store.update_member(member)
        except ConnectorError as e:
            logger.error(f"Error updating member {member.email} in Baserow: {e}")
            report.update_failures += 1
        else:
            report.members_updated += 1

    def process_reminder(self, pair: MatchedPair, now: datetime, report: RunReport) -> None:
        """Mark a lapsed member inactive and send a reminder if one is due."""
        member = pair.member.model_copy(deep=True)
        member.active_membership = False
        member.last_payment_date = pair.payment.order_date.date()

        if not reminder_due(member.last_contribution_email_date, now):
            logger.info(
                f"Reminder already sent to {member.email} on "
                f"{member.last_contribution_email_date}, skipping"
            )
            report.reminders_suppressed += 1
            return

        try:
            sent = self.notifier.notify(member)
        except ConnectorError as e:
            logger.error(f"Error sending email notification to {member.email}: {e}")
            report.send_failures += 1
        else:
            if sent:
                member.last_contribution_email_date = now.astimezone(timezone.utc).date()
                member.contribution_email_count += 1
                report.reminders_sent += 1
            else:
                report.reminders_skipped += 1

        self._persist(member, report)

    def process_status_update(self, pair: MatchedPair, report: RunReport) -> None:
        """Mark a member with a recent payment as active."""
        member = pair.member.model_copy(deep=True)
        member.active_membership = True
        member.last_payment_date = pair.payment.order_date.date()
        member.contribution_email_count = 0
        self._persist(member, report)

    def run(self, now: Optional[datetime] = None) -> RunReport:
        """Execute a renewal run.

        Fetch failures abort the run and yield a FAILED report. Failures
        while sending or persisting for one member are counted and the run
        carries on.

        Args:
            now: Reference time. Defaults to the current UTC time.

        Returns:
            RunReport with the results.
        """
        now = now or datetime.now(timezone.utc)
        report = RunReport(dry_run=self.dry_run, started_at=now)

        logger.info("Starting membership renewal run")

        try:
            payments = self.payment_source.fetch_payments()
            report.total_payments = len(payments)
            logger.info(f"Successfully fetched payments: {len(payments)}")

            renewals = filter_renewal_payments(payments, self.settings.renewal_form_slugs)
            report.renewal_payments = len(renewals)
            logger.info(f"Filtered payments on renewal forms: {len(renewals)}")

            unique_payments = latest_payment_per_payer(renewals)
            report.unique_payers = len(unique_payments)
            logger.info(f"Unique emails with most recent payment data: {len(unique_payments)}")

            members = self.member_store.list_members()
            report.total_members = len(members)
            logger.info(f"Successfully fetched members: {len(members)}")
        except ConnectorError as e:
            logger.error(f"Renewal run aborted while fetching data: {e}")
            report.status = RunStatus.FAILED
            report.error_message = str(e)
            report.completed_at = datetime.now(timezone.utc)
            return report

        plan = self.reconciler.reconcile(unique_payments, members, now)
        report.total_matched = plan.matched_count
        report.reminders_needed = len(plan.reminders)
        report.status_updates = len(plan.status_updates)

        logger.info(f"Members with payment needed: {len(plan.reminders)}")
        for pair in plan.reminders:
            self.process_reminder(pair, now, report)
        logger.info("Finished updating members with payment needed")

        logger.info(f"Members status to update: {len(plan.status_updates)}")
        for pair in plan.status_updates:
            self.process_status_update(pair, report)
        logger.info("Finished updating members status")

        report.stats = compute_stats(
            members,
            unique_payments,
            self.reconciler.build_email_index(members),
            self.settings,
        )
        log_stats(report.stats)

        report.status = RunStatus.COMPLETED
        report.completed_at = datetime.now(timezone.utc)
        logger.info(
            f"Renewal run completed: {report.reminders_sent} reminders sent, "
            f"{report.members_updated} members updated, "
            f"{report.send_failures + report.update_failures} failures"
        )
        return report
