"""Baserow member store."""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings
from ..records import MemberRecord
from .base import ConnectorError, MemberStoreBase, check_response, decode_json

logger = logging.getLogger(__name__)

SERVICE = "baserow"

# Column names of the member table (user field names)
FIELD_ID = "id"
FIELD_SURNAME = "Surname"
FIELD_FIRST_NAME = "First name"
FIELD_EMAIL = "E-mail"
FIELD_ALTERNATIVE_EMAIL_1 = "Alternative E-mail 1"
FIELD_ALTERNATIVE_EMAIL_2 = "Alternative E-mail 2"
FIELD_ACTIVE = "Active MemberShip"
FIELD_LAST_PAYMENT_DATE = "Last Payment Date"
FIELD_LAST_REMINDER_DATE = "Last Contribution Email Date"
FIELD_REMINDER_COUNT = "Number of Contributions Email"
FIELD_MEMBERSHIP_TYPE = "Membership type"
FIELD_PREFERRED_LANGUAGES = "Preferred languages"
FIELD_COUNTRY = "Country"

DATE_FORMAT = "%Y-%m-%d"


def _string(row: Dict[str, Any], key: str) -> str:
    value = row.get(key)
    return value if isinstance(value, str) else ""


def _bool(row: Dict[str, Any], key: str) -> bool:
    value = row.get(key)
    return value if isinstance(value, bool) else False


def _int(row: Dict[str, Any], key: str) -> int:
    value = row.get(key)
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        # number columns come back as strings
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _select_id(row: Dict[str, Any], key: str) -> int:
    value = row.get(key)
    if isinstance(value, dict) and isinstance(value.get("id"), (int, float)):
        return int(value["id"])
    return 0


def _multi_select_ids(row: Dict[str, Any], key: str) -> List[int]:
    value = row.get(key)
    if not isinstance(value, list):
        return []
    return [
        int(item["id"])
        for item in value
        if isinstance(item, dict) and isinstance(item.get("id"), (int, float))
    ]


def _select_or_text(row: Dict[str, Any], key: str) -> str:
    value = row.get(key)
    if isinstance(value, dict):
        option = value.get("value")
        return option if isinstance(option, str) else ""
    return value if isinstance(value, str) else ""


def _date(row: Dict[str, Any], key: str) -> Optional[date]:
    value = row.get(key)
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.strptime(value[:10], DATE_FORMAT).date()
    except ValueError:
        logger.debug(f"Ignoring unparseable date {value!r} in column {key!r}")
        return None


def member_from_row(row: Dict[str, Any]) -> MemberRecord:
    """Build a MemberRecord from a Baserow row, tolerating missing columns."""
    row_id = _int(row, FIELD_ID) or _int(row, "Id")
    return MemberRecord(
        id=row_id,
        surname=_string(row, FIELD_SURNAME),
        first_name=_string(row, FIELD_FIRST_NAME),
        email=_string(row, FIELD_EMAIL),
        alternative_email_1=_string(row, FIELD_ALTERNATIVE_EMAIL_1),
        alternative_email_2=_string(row, FIELD_ALTERNATIVE_EMAIL_2),
        active_membership=_bool(row, FIELD_ACTIVE),
        last_payment_date=_date(row, FIELD_LAST_PAYMENT_DATE),
        last_contribution_email_date=_date(row, FIELD_LAST_REMINDER_DATE),
        contribution_email_count=_int(row, FIELD_REMINDER_COUNT),
        membership_type=_select_id(row, FIELD_MEMBERSHIP_TYPE),
        preferred_languages=_multi_select_ids(row, FIELD_PREFERRED_LANGUAGES),
        country=_select_or_text(row, FIELD_COUNTRY),
    )


def update_payload(member: MemberRecord) -> Dict[str, Any]:
    """Fields written back by a partial update."""
    return {
        FIELD_ACTIVE: member.active_membership,
        FIELD_LAST_PAYMENT_DATE: (
            member.last_payment_date.strftime(DATE_FORMAT) if member.last_payment_date else None
        ),
        FIELD_LAST_REMINDER_DATE: (
            member.last_contribution_email_date.strftime(DATE_FORMAT)
            if member.last_contribution_email_date else None
        ),
        FIELD_REMINDER_COUNT: member.contribution_email_count,
    }


class BaserowMemberStore(MemberStoreBase):
    """Members table stored in Baserow, accessed with a database token."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None):
        """Initialize the member store.

        Args:
            settings: Application settings (token, table id, base URL).
            client: Optional preconfigured HTTP client.
        """
        self.settings = settings
        self._client = client or httpx.Client()

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Token {self.settings.baserow_api_token}"}

    @property
    def _table_url(self) -> str:
        return (
            f"{self.settings.baserow_base_url}/api/database/rows/table/"
            f"{self.settings.baserow_table_id}/"
        )

    def list_members(self) -> List[MemberRecord]:
        """Fetch every row of the member table, following pagination links.

        Returns:
            List of MemberRecord.

        Raises:
            ConnectorError: On any transport, status or decoding failure.
        """
        logger.info("Fetching members from Baserow")

        url: Optional[str] = self._table_url
        params: Optional[Dict[str, str]] = {"user_field_names": "true"}
        members: List[MemberRecord] = []

        while url:
            try:
                response = self._client.get(url, params=params, headers=self._headers)
            except httpx.HTTPError as e:
                logger.error(f"Failed to send request: {e}")
                raise ConnectorError(SERVICE, f"rows request failed: {e}") from e

            check_response(SERVICE, response, "get members")
            body = decode_json(SERVICE, response, "rows")
            if not isinstance(body, dict) or not isinstance(body.get("results", []), list):
                raise ConnectorError(SERVICE, "unexpected rows payload")

            for row in body.get("results", []):
                if isinstance(row, dict):
                    members.append(member_from_row(row))

            # the next link already carries the query string
            url = body.get("next") or None
            params = None
            if url:
                logger.info(f"Fetching next page of members: {url}")

        logger.info(f"Successfully fetched all members from Baserow: {len(members)}")
        return members

    def update_member(self, member: MemberRecord) -> None:
        """Patch the renewal bookkeeping fields of one row.

        Args:
            member: Member carrying the values to write.

        Raises:
            ConnectorError: If the update is not acknowledged with HTTP 200.
        """
        logger.debug(f"Updating member {member.id} ({member.email}) in Baserow")
        try:
            response = self._client.patch(
                f"{self._table_url}{member.id}/",
                params={"user_field_names": "true"},
                headers=self._headers,
                json=update_payload(member),
            )
        except httpx.HTTPError as e:
            raise ConnectorError(SERVICE, f"update request failed: {e}") from e

        check_response(SERVICE, response, "update member")
        logger.info(f"Successfully updated member {member.id} ({member.email}) in Baserow")

    def close(self) -> None:
        self._client.close()
