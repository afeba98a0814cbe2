"""Clients for the payment source, member store and email sender."""

from .base import (
    ConnectorError,
    PaymentSourceBase,
    MemberStoreBase,
    EmailSenderBase,
)
from .helloasso import HelloAssoPaymentSource
from .baserow import BaserowMemberStore
from .brevo import BrevoEmailSender
from .simulator import (
    SimulatorConfig,
    InMemoryPaymentSource,
    InMemoryMemberStore,
    DryRunMemberStore,
    RecordingEmailSender,
)

__all__ = [
    # Base classes and errors
    "ConnectorError",
    "PaymentSourceBase",
    "MemberStoreBase",
    "EmailSenderBase",
    # Connectors
    "HelloAssoPaymentSource",
    "BaserowMemberStore",
    "BrevoEmailSender",
    # Simulators
    "SimulatorConfig",
    "InMemoryPaymentSource",
    "InMemoryMemberStore",
    "DryRunMemberStore",
    "RecordingEmailSender",
]
