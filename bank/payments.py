"""
Payment Processor.

The accounts service does not respond well to load, so it is contacted only
once every local check has passed:

    amount sign -> card format -> card uniqueness -> hold -> persist

Card uniqueness is owned by the ``UNIQUE(card_number)`` constraint. The
read before the hold only spares the accounts service obvious duplicates;
a request that loses an insert race against the same card still ends up
as ``DUPLICATE_CARD`` and gives its hold back.

The processors own their transaction boundaries: pass them a session with
no transaction in progress.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bank.accounts import AccountsGateway, HoldRef, HoldResponse, HoldResult
from bank.cards import is_valid_card_number
from bank.errors import InternalConsistencyError, Outcome
from bank.models import Payment, PaymentStatus

logger = logging.getLogger(__name__)

HOLD_OUTCOMES = {
    HoldResult.APPROVED: (PaymentStatus.APPROVED, Outcome.APPROVED),
    HoldResult.INSUFFICIENT_FUNDS: (PaymentStatus.DECLINED, Outcome.DECLINED_INSUFFICIENT_FUNDS),
    HoldResult.INVALID_ACCOUNT_NUMBER: (PaymentStatus.DECLINED, Outcome.DECLINED_INVALID_ACCOUNT),
    HoldResult.SERVICE_UNAVAILABLE: (PaymentStatus.FAILED, Outcome.FAILED_SERVICE_UNAVAILABLE),
    HoldResult.INTERNAL_ERROR: (PaymentStatus.FAILED, Outcome.FAILED_INTERNAL_ERROR),
}


@dataclass
class PaymentResult:
    outcome: Outcome
    payment: Optional[Payment] = None


def parse_id(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def get_payment(db: Session, payment_id) -> Optional[Payment]:
    parsed = parse_id(payment_id)
    if parsed is None:
        return None
    return db.get(Payment, parsed)


def card_in_use(db: Session, card_number: str) -> bool:
    with db.begin():
        return db.scalar(select(Payment.id).where(Payment.card_number == card_number)) is not None


def create_payment(db: Session, gateway: AccountsGateway, amount: int, card_number: str) -> PaymentResult:
    if amount < 0:
        return _reject(Outcome.REJECTED_NEGATIVE, amount, card_number)
    if amount == 0:
        return _reject(Outcome.REJECTED_ZERO, amount, card_number)
    if not is_valid_card_number(card_number):
        return _reject(Outcome.REJECTED_FORMAT, amount, card_number)
    if card_in_use(db, card_number):
        return _reject(Outcome.DUPLICATE_CARD, amount, card_number)

    response = gateway.hold(card_number, amount)
    status, outcome = _resolve_hold(gateway, response)

    try:
        with db.begin():
            payment = Payment(
                id=uuid.uuid4(),
                amount=amount,
                card_number=card_number,
                status=status,
                hold_id=response.hold.id if response.hold is not None else None,
            )
            db.add(payment)
    except IntegrityError:
        _release_hold(gateway, response.hold)
        if card_in_use(db, card_number):
            return _reject(Outcome.DUPLICATE_CARD, amount, card_number)
        raise
    except Exception:
        _release_hold(gateway, response.hold)
        raise

    logger.info(
        "Payment created",
        extra={
            "payment_id": str(payment.id),
            "amount": amount,
            "card_number": card_number,
            "status": status.value,
            "outcome": outcome.code,
        },
    )
    return PaymentResult(outcome, payment)


def _resolve_hold(gateway: AccountsGateway, response: HoldResponse):
    try:
        result = HoldResult(response.result)
    except ValueError:
        _release_hold(gateway, response.hold)
        raise InternalConsistencyError(f"unknown hold result {response.result!r}")

    if response.approved != (response.hold is not None):
        _release_hold(gateway, response.hold)
        raise InternalConsistencyError(
            f"hold result {result.value!r} inconsistent with hold reference {response.hold!r}"
        )
    return HOLD_OUTCOMES[result]


def _release_hold(gateway: AccountsGateway, hold: Optional[HoldRef]) -> None:
    if hold is None:
        return
    gateway.release(hold)
    logger.info("Released unused hold", extra={"hold_id": str(hold.id)})


def _reject(outcome: Outcome, amount: int, card_number) -> PaymentResult:
    logger.info(
        "Payment rejected",
        extra={
            "amount": amount,
            "card_number": card_number,
            "outcome": outcome.code,
            "category": outcome.category.value,
        },
    )
    return PaymentResult(outcome)
