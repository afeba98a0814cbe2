"""Reconciliation logic for matching payments to members."""

import logging
from datetime import datetime, timedelta
from typing import List, Dict, Tuple

from .models import (
    Action,
    MatchedPair,
    MemberRecord,
    PaymentRecord,
    ReconciliationPlan,
)

logger = logging.getLogger(__name__)

REMINDER_INTERVAL = timedelta(days=14)


def one_year_before(moment: datetime) -> datetime:
    """Same wall-clock time one calendar year earlier.

    February 29th rolls forward to March 1st of the previous year.
    """
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        return moment.replace(year=moment.year - 1, month=3, day=1)


class Reconciler:
    """Reconciliation engine joining renewal payments to member records."""

    def build_email_index(self, members: List[MemberRecord]) -> Dict[str, MemberRecord]:
        """Map every primary and alternate email to its member.

        When two members share an address the one listed last wins.

        Args:
            members: All members from the member store.

        Returns:
            Dictionary keyed by email address.
        """
        index: Dict[str, MemberRecord] = {}
        for member in members:
            for email in member.emails():
                # TODO: report shared addresses instead of silently overwriting
                index[email] = member
        return index

    def match(
        self,
        payments: List[PaymentRecord],
        index: Dict[str, MemberRecord],
    ) -> Tuple[List[MatchedPair], List[PaymentRecord]]:
        """Join payments to members by payer email.

        A member paying under several of its addresses gets a single pair
        holding the latest of those payments; on equal dates the first one
        seen is kept. The superseded payments are neither paired nor unmatched.

        Args:
            payments: Reduced payments, one per payer email.
            index: Email index built by ``build_email_index``.

        Returns:
            Tuple of (matched_pairs, unmatched_payments).
        """
        # member id -> pair, in first-match order
        matched: Dict[int, MatchedPair] = {}
        unmatched: List[PaymentRecord] = []
        for payment in payments:
            member = index.get(payment.payer_email)
            if member is None:
                unmatched.append(payment)
                continue
            current = matched.get(member.id)
            if current is None or payment.order_date > current.payment.order_date:
                matched[member.id] = MatchedPair(member=member, payment=payment)
        return list(matched.values()), unmatched

    def classify(self, pair: MatchedPair, now: datetime) -> Action:
        """Decide what a matched pair needs.

        Args:
            pair: Member and its latest renewal payment.
            now: Reference time of the run.

        Returns:
            The single Action that applies to the pair.
        """
        threshold = one_year_before(now)
        order_date = pair.payment.order_date

        if order_date < threshold:
            return Action.NEEDS_REMINDER

        member = pair.member
        if not member.active_membership or member.last_payment_date != order_date.date():
            return Action.NEEDS_STATUS_UPDATE

        return Action.NO_ACTION

    def reconcile(
        self,
        payments: List[PaymentRecord],
        members: List[MemberRecord],
        now: datetime,
    ) -> ReconciliationPlan:
        """Match payments to members and sort pairs by required action.

        The reconciliation process:
        1. Build an email lookup over primary and alternate addresses
        2. Join each reduced payment to a member by payer email
        3. Classify each pair against the one-year threshold

        Args:
            payments: Reduced payments, one per payer email.
            members: All members from the member store.
            now: Reference time of the run.

        Returns:
            ReconciliationPlan grouping the pairs by action.
        """
        logger.info(
            f"Starting reconciliation: {len(payments)} payments, {len(members)} members"
        )

        index = self.build_email_index(members)
        matched, unmatched = self.match(payments, index)

        plan = ReconciliationPlan(unmatched_payments=unmatched)
        for pair in matched:
            action = self.classify(pair, now)
            if action == Action.NEEDS_REMINDER:
                plan.reminders.append(pair)
            elif action == Action.NEEDS_STATUS_UPDATE:
                plan.status_updates.append(pair)
            else:
                plan.no_action.append(pair)

        logger.info(
            f"Reconciliation complete: {plan.matched_count} matched, "
            f"{len(plan.reminders)} need a reminder, "
            f"{len(plan.status_updates)} need a status update, "
            f"{len(unmatched)} payments without member"
        )
        return plan
