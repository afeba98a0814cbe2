"""Tests for the in-memory connectors."""

import logging
import pytest

from membership_renewal.connectors import (
    ConnectorError,
    DryRunMemberStore,
    InMemoryMemberStore,
    InMemoryPaymentSource,
    RecordingEmailSender,
    SimulatorConfig,
)
from membership_renewal.records import ReminderEmail


def reminder(to_email="alice@example.org"):
    return ReminderEmail(
        sender_name="Boavizta",
        sender_email="no-reply@boavizta.org",
        to_email=to_email,
        to_name="Alice Martin",
        subject="It's time to renew your Boavizta membership",
        html_content="<p>Dear Alice,</p>",
        text_content="Dear Alice,",
    )


class TestInMemoryPaymentSource:
    """Tests for InMemoryPaymentSource."""

    def test_returns_copy_of_payments(self, make_payment):
        payments = [make_payment(email="a@example.org"), make_payment(email="b@example.org")]
        source = InMemoryPaymentSource(payments)

        fetched = source.fetch_payments()
        fetched.clear()

        assert len(source.fetch_payments()) == 2

    def test_empty_by_default(self):
        assert InMemoryPaymentSource().fetch_payments() == []

    def test_fail_fetch(self, make_payment):
        source = InMemoryPaymentSource([make_payment()], config=SimulatorConfig(fail_fetch=True))

        with pytest.raises(ConnectorError):
            source.fetch_payments()


class TestInMemoryMemberStore:
    """Tests for InMemoryMemberStore."""

    def test_list_members_returns_copies(self, make_member):
        store = InMemoryMemberStore([make_member(member_id=1)])

        listed = store.list_members()
        listed[0].active_membership = False

        assert store.get_member(1).active_membership is True

    def test_update_overwrites_and_records(self, make_member):
        store = InMemoryMemberStore([make_member(member_id=1, contribution_email_count=0)])
        updated = make_member(member_id=1, contribution_email_count=3)

        store.update_member(updated)

        assert store.get_member(1).contribution_email_count == 3
        assert [m.id for m in store.updates] == [1]

    def test_update_failure(self, make_member):
        store = InMemoryMemberStore(
            [make_member(member_id=1)], config=SimulatorConfig(fail_update_ids=frozenset({1}))
        )

        with pytest.raises(ConnectorError) as exc_info:
            store.update_member(make_member(member_id=1, active_membership=False))

        assert exc_info.value.status_code == 500
        assert store.updates == []
        assert store.get_member(1).active_membership is True

    def test_get_unknown_member(self):
        assert InMemoryMemberStore().get_member(99) is None


class TestDryRunMemberStore:
    """Tests for DryRunMemberStore."""

    def test_reads_pass_through(self, make_member):
        backing = InMemoryMemberStore([make_member(member_id=1), make_member(member_id=2)])
        store = DryRunMemberStore(backing)

        assert [m.id for m in store.list_members()] == [1, 2]

    def test_updates_are_not_written(self, make_member, caplog):
        backing = InMemoryMemberStore([make_member(member_id=1)])
        store = DryRunMemberStore(backing)

        with caplog.at_level(logging.INFO):
            store.update_member(make_member(member_id=1, active_membership=False))

        assert backing.updates == []
        assert backing.get_member(1).active_membership is True
        assert len(store.updates) == 1
        assert "[dry-run] Would update member 1" in caplog.text


class TestRecordingEmailSender:
    """Tests for RecordingEmailSender."""

    def test_records_sent_email(self):
        sender = RecordingEmailSender()

        sender.send(reminder())

        assert [e.to_email for e in sender.sent] == ["alice@example.org"]

    def test_clear(self):
        sender = RecordingEmailSender()
        sender.send(reminder())

        sender.clear()

        assert sender.sent == []

    def test_fail_send_to(self):
        sender = RecordingEmailSender(
            config=SimulatorConfig(fail_send_to=frozenset({"bounce@example.org"}))
        )

        with pytest.raises(ConnectorError):
            sender.send(reminder("bounce@example.org"))
        sender.send(reminder("alice@example.org"))

        assert [e.to_email for e in sender.sent] == ["alice@example.org"]
