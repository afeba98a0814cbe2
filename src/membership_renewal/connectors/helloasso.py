"""HelloAsso payment source."""

import logging
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..config import Settings
from ..records import PaymentRecord
from .base import ConnectorError, PaymentSourceBase, check_response, decode_json

logger = logging.getLogger(__name__)

SERVICE = "helloasso"


class _Order(BaseModel):
    id: Optional[int] = None
    date: datetime
    form_slug: str = Field(default="", alias="formSlug")
    form_type: str = Field(default="", alias="formType")


class _Payer(BaseModel):
    email: str = ""
    country: str = ""
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")


class _PaymentItem(BaseModel):
    id: Optional[int] = None
    amount: Optional[int] = None
    state: str = ""
    order: _Order
    payer: Optional[_Payer] = None


class _PaymentPage(BaseModel):
    data: List[_PaymentItem] = Field(default_factory=list)


class HelloAssoPaymentSource(PaymentSourceBase):
    """Fetch every authorized or registered payment of an organization."""

    PAGE_SIZE = 100
    STATES = ("Authorized", "Registered")

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        """Initialize the payment source.

        Args:
            settings: Application settings (credentials, organization, from-date).
            client: Optional preconfigured HTTP client.
        """
        self.settings = settings
        self._client = client or httpx.Client()

    def _get_token(self) -> str:
        """Exchange the client credentials for an OAuth access token."""
        logger.debug("Sending OAuth token request")
        try:
            response = self._client.post(
                f"{self.settings.helloasso_base_url}/oauth2/token",
                data={
                    "client_id": self.settings.helloasso_client_id,
                    "client_secret": self.settings.helloasso_client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send token request: {e}")
            raise ConnectorError(SERVICE, f"token request failed: {e}") from e

        check_response(SERVICE, response, "get token")
        token = decode_json(SERVICE, response, "token")
        if not isinstance(token, dict) or not token.get("access_token"):
            raise ConnectorError(SERVICE, "token response has no access_token")

        logger.debug("OAuth token obtained successfully")
        return token["access_token"]

    def _fetch_page(self, token: str, page_index: int) -> List[PaymentRecord]:
        params = [
            ("pageSize", self.PAGE_SIZE),
            ("from", self.settings.helloasso_from_date.isoformat()),
            ("pageIndex", page_index),
        ]
        params.extend(("states", state) for state in self.STATES)

        try:
            response = self._client.get(
                f"{self.settings.helloasso_base_url}/v5/organizations/"
                f"{self.settings.helloasso_org_slug}/payments",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            raise ConnectorError(SERVICE, f"payments request failed: {e}") from e

        check_response(SERVICE, response, "get payments")
        try:
            page = _PaymentPage.model_validate(decode_json(SERVICE, response, "payments"))
        except ValidationError as e:
            raise ConnectorError(SERVICE, f"unexpected payments payload on page {page_index}") from e

        payments: List[PaymentRecord] = []
        for item in page.data:
            # a missing or null payer decodes as an empty one
            payer = item.payer or _Payer()
            payments.append(PaymentRecord(
                order_form_slug=item.order.form_slug,
                order_date=item.order.date,
                payer_email=payer.email,
                payer_first_name=payer.first_name,
                payer_last_name=payer.last_name,
            ))
        return payments

    def fetch_payments(self) -> List[PaymentRecord]:
        """Fetch all payments, page by page, until an empty page comes back.

        Returns:
            List of PaymentRecord, one per raw payment.

        Raises:
            ConnectorError: On any transport, status or decoding failure.
        """
        logger.info("Getting OAuth token...")
        token = self._get_token()

        logger.info(
            f"Fetching payments for organization {self.settings.helloasso_org_slug} "
            f"from {self.settings.helloasso_from_date.isoformat()}"
        )

        payments: List[PaymentRecord] = []
        page_index = 1
        while True:
            page = self._fetch_page(token, page_index)
            if not page:
                break
            payments.extend(page)
            logger.info(
                f"Found {len(page)} payments on page {page_index}, total {len(payments)}"
            )
            page_index += 1

        logger.info(f"Finished fetching all payments: {len(payments)}")
        return payments

    def close(self) -> None:
        self._client.close()
