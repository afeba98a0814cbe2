"""Shared test fixtures and configuration."""

import json
import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List

import httpx

from membership_renewal.config import Settings
from membership_renewal.records import MemberRecord, PaymentRecord

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

INDIVIDUAL = 2521
ORGANIZATION = 2520
ENGLISH_ID = 2590
FRENCH_ID = 2591


@pytest.fixture
def env_vars() -> Dict[str, str]:
    """Return a complete set of required environment variables."""
    return {
        "HELLOASSO_API_ID": "client-id",
        "HELLOASSO_API_SECRET": "client-secret",
        "HELLOASSO_ORG_SLUG": "boavizta",
        "HELLOASSO_FROM_DATE": "2023-01-01",
        "BASEROW_API_TOKEN": "baserow-token",
        "BASEROW_MEMBER_TABLE_ID": "42",
        "BREVO_API_KEY": "brevo-key",
    }


@pytest.fixture
def settings(env_vars) -> Settings:
    """Settings built from the test environment."""
    return Settings.from_env(env_vars)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_payment() -> Callable[..., PaymentRecord]:
    """Factory for payments dated a number of days before NOW."""
    def _make(
        email: str = "alice@example.org",
        days_ago: int = 10,
        slug: str = "annual-membership-fee",
        **kwargs: Any,
    ) -> PaymentRecord:
        return PaymentRecord(
            order_form_slug=slug,
            order_date=kwargs.pop("order_date", NOW - timedelta(days=days_ago)),
            payer_email=email,
            payer_first_name=kwargs.pop("payer_first_name", "Alice"),
            payer_last_name=kwargs.pop("payer_last_name", "Martin"),
        )
    return _make


@pytest.fixture
def make_member() -> Callable[..., MemberRecord]:
    """Factory for member rows with sensible defaults."""
    def _make(member_id: int = 1, email: str = "alice@example.org", **kwargs: Any) -> MemberRecord:
        values: Dict[str, Any] = {
            "id": member_id,
            "surname": "Martin",
            "first_name": "alice",
            "email": email,
            "active_membership": True,
            "membership_type": INDIVIDUAL,
            "preferred_languages": [ENGLISH_ID],
            "country": "Germany",
        }
        values.update(kwargs)
        return MemberRecord(**values)
    return _make


class RecordedRequests:
    """Requests captured by a MockTransport handler."""

    def __init__(self):
        self.requests: List[httpx.Request] = []

    def json(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def recorded() -> RecordedRequests:
    return RecordedRequests()


@pytest.fixture
def mock_client(recorded) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build an httpx.Client whose requests are answered by ``handler``."""
    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        def _record(request: httpx.Request) -> httpx.Response:
            recorded.requests.append(request)
            return handler(request)
        return httpx.Client(transport=httpx.MockTransport(_record))
    return _make


@pytest.fixture
def baserow_row() -> Dict[str, Any]:
    """A member row as returned by Baserow with user field names."""
    return {
        "id": 7,
        "order": "1.00000000000000000000",
        "Surname": "Dupont",
        "First name": "JEAN",
        "E-mail": "jean@example.fr",
        "Alternative E-mail 1": "jean.dupont@work.fr",
        "Alternative E-mail 2": "",
        "Active MemberShip": True,
        "Last Payment Date": "2024-05-02",
        "Last Contribution Email Date": None,
        "Number of Contributions Email": "2",
        "Membership type": {"id": INDIVIDUAL, "value": "Individual", "color": "blue"},
        "Preferred languages": [
            {"id": FRENCH_ID, "value": "French", "color": "red"},
            {"id": ENGLISH_ID, "value": "English", "color": "green"},
        ],
        "Country": "France",
    }
