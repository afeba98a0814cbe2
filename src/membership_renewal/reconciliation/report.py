"""Statistics and report generation for renewal runs."""

import json
import logging
from collections import Counter
from typing import Dict, List

from ..config import Settings
from ..records import MemberRecord, PaymentRecord
from .models import RunReport, RunStats

logger = logging.getLogger(__name__)


def compute_stats(
    members: List[MemberRecord],
    payments: List[PaymentRecord],
    email_index: Dict[str, MemberRecord],
    settings: Settings,
) -> RunStats:
    """Count members without a renewal payment and payments without a member.

    A member has a payment when any of its addresses, primary or alternate,
    is a payer email. Counting on the primary address alone would list members
    paying from an alternate address as unpaid.

    Args:
        members: All members from the member store.
        payments: Reduced payments, one per payer email.
        email_index: Email to member lookup used during reconciliation.
        settings: Provides the membership type ids to call out.

    Returns:
        RunStats with the set-difference counts.
    """
    payer_emails = {p.payer_email for p in payments}

    without_payment = [
        m for m in members if not any(email in payer_emails for email in m.emails())
    ]
    by_type = Counter(m.membership_type for m in without_payment)
    orphan_payments = [p for p in payments if p.payer_email not in email_index]

    return RunStats(
        members_without_payment=len(without_payment),
        members_without_payment_by_type=dict(by_type),
        individual_members_without_payment=by_type.get(settings.individual_type_id, 0),
        organization_members_without_payment=by_type.get(settings.organization_type_id, 0),
        payments_without_member=len(orphan_payments),
    )


def log_stats(stats: RunStats) -> None:
    logger.info(f"Members without payment entry: {stats.members_without_payment}")
    logger.info(f"Individual members without payment entry: {stats.individual_members_without_payment}")
    logger.info(f"Organization members without payment entry: {stats.organization_members_without_payment}")
    for type_id, count in sorted(stats.members_without_payment_by_type.items()):
        logger.debug(f"Members without payment entry of type {type_id}: {count}")
    logger.info(f"Payment entries without member: {stats.payments_without_member}")


class ReportGenerator:
    """Generator for run reports in various formats."""

    def __init__(self, report: RunReport):
        self.report = report

    def to_json(self, indent: int = 2) -> str:
        """Generate JSON representation of the report."""
        return json.dumps(self.report.to_summary_dict(), indent=indent)

    def to_summary_text(self) -> str:
        """Generate a human-readable text summary of the report."""
        summary = self.report.to_summary_dict()
        fetch = summary["fetch"]
        actions = summary["actions"]
        stats = summary["statistics"]

        lines = [
            "=" * 60,
            "MEMBERSHIP RENEWAL REPORT" + (" (DRY RUN)" if summary["dry_run"] else ""),
            "=" * 60,
            f"Status: {summary['status']}",
            "",
            "Fetched:",
            f"  Payments: {fetch['total_payments']}",
            f"  Renewal Payments: {fetch['renewal_payments']}",
            f"  Unique Payers: {fetch['unique_payers']}",
            f"  Members: {fetch['total_members']}",
            f"  Matched: {fetch['total_matched']}",
            "",
            "Actions:",
            f"  Reminders Needed: {actions['reminders_needed']}",
            f"  Reminders Sent: {actions['reminders_sent']}",
            f"  Reminders Skipped: {actions['reminders_skipped']}",
            f"  Reminders Suppressed: {actions['reminders_suppressed']}",
            f"  Status Updates: {actions['status_updates']}",
            f"  Members Updated: {actions['members_updated']}",
            f"  Send Failures: {actions['send_failures']}",
            f"  Update Failures: {actions['update_failures']}",
            "",
            "Statistics:",
            f"  Members Without Payment: {stats['members_without_payment']}",
            f"    Individual: {stats['individual_members_without_payment']}",
            f"    Organization: {stats['organization_members_without_payment']}",
            f"  Payments Without Member: {stats['payments_without_member']}",
            "",
            f"Started At: {summary['started_at']}",
            f"Completed At: {summary['completed_at'] or 'N/A'}",
        ]

        if summary.get("error_message"):
            lines.extend([
                "",
                "Error:",
                f"  {summary['error_message']}",
            ])

        lines.append("=" * 60)

        return "\n".join(lines)
