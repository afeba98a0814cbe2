# membership_renewal package
__version__ = "0.1.0"

from .config import Settings, ConfigurationError
from .records import PaymentRecord, MemberRecord, ReminderEmail
from .connectors import ConnectorError

from .reconciliation import (
    RenewalService,
    Reconciler,
    ReminderNotifier,
    ReportGenerator,
    RunReport,
    RunStatus,
    Action,
)
