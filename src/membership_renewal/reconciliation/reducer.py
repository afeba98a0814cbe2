"""Reduce raw payments to the latest renewal payment per payer."""

from typing import Dict, Iterable, List

from .models import PaymentRecord


def filter_renewal_payments(
    payments: Iterable[PaymentRecord],
    form_slugs: Iterable[str],
) -> List[PaymentRecord]:
    """Keep payments made on one of the renewal-fee forms (one per locale)."""
    slugs = frozenset(form_slugs)
    return [p for p in payments if p.order_form_slug in slugs]


def latest_payment_per_payer(payments: Iterable[PaymentRecord]) -> List[PaymentRecord]:
    """Collapse payments to the most recent one for each payer email.

    On equal order dates the payment seen first is kept. The result keeps the
    order in which each payer email first appears.

    Args:
        payments: Renewal payments, possibly several per payer.

    Returns:
        One PaymentRecord per distinct payer email.
    """
    latest: Dict[str, PaymentRecord] = {}
    for payment in payments:
        current = latest.get(payment.payer_email)
        if current is None or payment.order_date > current.order_date:
            latest[payment.payer_email] = payment
    return list(latest.values())
