from abc import ABC, abstractmethod
from typing import Container, List, Optional

import httpx

from ..records import MemberRecord, PaymentRecord, ReminderEmail


class ConnectorError(RuntimeError):
    """A call to an external service failed or returned something unusable."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        detail = f"{service}: {message}"
        if status_code is not None:
            detail = f"{detail}, status code: {status_code}"
        super().__init__(detail)


class PaymentSourceBase(ABC):
    """
    Read-only access to the payment processor. Implementations return every
    payment in the configured window, pages already exhausted.
    """

    @abstractmethod
    def fetch_payments(self) -> List[PaymentRecord]:
        raise NotImplementedError


class MemberStoreBase(ABC):
    """Snapshot reads and per-row partial updates of the membership table."""

    @abstractmethod
    def list_members(self) -> List[MemberRecord]:
        raise NotImplementedError

    @abstractmethod
    def update_member(self, member: MemberRecord) -> None:
        """
        Write back the renewal bookkeeping fields of one member.
        """
        raise NotImplementedError


class EmailSenderBase(ABC):

    @abstractmethod
    def send(self, email: ReminderEmail) -> None:
        """
        Send one email. Returns only if the service accepted it.
        """
        raise NotImplementedError


def check_response(
    service: str,
    response: httpx.Response,
    what: str,
    ok: Container[int] = (200,),
) -> None:
    """Raise ConnectorError unless the response status code is in ``ok``."""
    if response.status_code not in ok:
        raise ConnectorError(
            service,
            f"failed to {what}: {response.text}",
            status_code=response.status_code,
        )


def decode_json(service: str, response: httpx.Response, what: str):
    try:
        return response.json()
    except ValueError as e:
        raise ConnectorError(service, f"failed to decode {what} response") from e
