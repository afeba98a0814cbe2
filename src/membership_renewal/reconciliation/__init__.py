"""Membership payment reconciliation.

This module matches renewal payments from the payment source with the rows
of the member store, then keeps membership status current and sends
renewal reminders to lapsed members.

Features:
- Reduce payments to the latest renewal payment per payer email
- Match payments to members by primary or alternate email
- Classify each match as reminder, status update or no action
- Send bilingual reminders at most once every 14 days
- Report members without payment and payments without member
"""

from .models import (
    Action,
    RunStatus,
    PaymentRecord,
    MemberRecord,
    MatchedPair,
    ReminderEmail,
    ReconciliationPlan,
    RunStats,
    RunReport,
)
from .reducer import filter_renewal_payments, latest_payment_per_payer
from .reconciler import Reconciler, one_year_before
from .templates import ReminderTemplates
from .notifier import ReminderNotifier, normalize_name, select_locale
from .service import RenewalService, reminder_due
from .report import ReportGenerator, compute_stats, log_stats

__all__ = [
    # Models
    "Action",
    "RunStatus",
    "PaymentRecord",
    "MemberRecord",
    "MatchedPair",
    "ReminderEmail",
    "ReconciliationPlan",
    "RunStats",
    "RunReport",
    # Reduction
    "filter_renewal_payments",
    "latest_payment_per_payer",
    # Core Components
    "Reconciler",
    "one_year_before",
    "ReminderTemplates",
    "ReminderNotifier",
    "normalize_name",
    "select_locale",
    "RenewalService",
    "reminder_due",
    # Reporting
    "ReportGenerator",
    "compute_stats",
    "log_stats",
]
