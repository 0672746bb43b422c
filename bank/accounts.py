"""
Client contract for the remote service that manages customer accounts.

Placing a hold does NOT move money: it only prevents the held funds from
being spent elsewhere until either

* the money is withdrawn and sent to the merchant (``withdraw``), or
* the hold is released and the customer may spend it again (``release``).

For every approved ``hold`` there MUST be exactly one matching ``withdraw``
or ``release``. A leaked hold leaves the customer without the goods and
without access to their money.

Calls always complete: the service never surfaces transport failures, only
the business outcomes listed in ``HoldResult``.
"""

import enum
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from bank.cards import account_number

logger = logging.getLogger(__name__)


class HoldResult(str, enum.Enum):
    APPROVED = "approved"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_ACCOUNT_NUMBER = "invalid_account_number"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class HoldRef:
    """Opaque reference to a hold; the held amount and account are implied by it."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True)
class HoldResponse:
    result: HoldResult
    hold: Optional[HoldRef] = None

    @property
    def approved(self) -> bool:
        return self.result == HoldResult.APPROVED


class AccountsGateway(ABC):

    @abstractmethod
    def hold(self, card_number: str, amount: int) -> HoldResponse:
        """Place a hold of ``amount`` on the account behind ``card_number``."""
        ...

    @abstractmethod
    def withdraw(self, hold: HoldRef) -> None:
        """Withdraw the held money; the hold is released atomically."""
        ...

    @abstractmethod
    def release(self, hold: HoldRef) -> None:
        """Cancel the hold without moving any money."""
        ...


class DummyAccountsService(AccountsGateway):
    """
    Development stand-in for the accounts service.

    No balances are tracked; magic values trigger the unhappy paths:

    - account ``INVALID_ACCOUNT_NUMBER`` -> ``invalid_account_number``
    - amount above ``MAX_VALID_AMOUNT`` -> ``insufficient_funds``
    """

    INVALID_ACCOUNT_NUMBER = "00"
    MIN_VALID_AMOUNT = 0
    MAX_VALID_AMOUNT = 1_000_000_00

    def hold(self, card_number: str, amount: int) -> HoldResponse:
        if amount < self.MIN_VALID_AMOUNT:
            raise ValueError("hold amount must not be negative")
        if account_number(card_number) == self.INVALID_ACCOUNT_NUMBER:
            return HoldResponse(HoldResult.INVALID_ACCOUNT_NUMBER)
        if amount > self.MAX_VALID_AMOUNT:
            return HoldResponse(HoldResult.INSUFFICIENT_FUNDS)
        return HoldResponse(HoldResult.APPROVED, HoldRef())

    def withdraw(self, hold: HoldRef) -> None:
        logger.info("Funds withdrawn", extra={"hold_id": str(hold.id)})

    def release(self, hold: HoldRef) -> None:
        logger.info("Hold released", extra={"hold_id": str(hold.id)})
