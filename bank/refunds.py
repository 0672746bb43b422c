"""
Refund Processor.

Partial refunds are allowed and a payment may be refunded several times,
but the refunded total can never exceed the payment amount. The check and
the insert run in one transaction that holds the payment row lock, so
concurrent refunds of the same payment are serialized by the database and
not by this process.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bank.errors import Outcome
from bank.models import MAX_AMOUNT, Payment, PaymentStatus, Refund
from bank.payments import parse_id

logger = logging.getLogger(__name__)


@dataclass
class RefundResult:
    outcome: Outcome
    refund: Optional[Refund] = None


def get_refund(db: Session, payment_id, refund_id) -> Optional[Refund]:
    parsed_payment_id = parse_id(payment_id)
    parsed_refund_id = parse_id(refund_id)
    if parsed_payment_id is None or parsed_refund_id is None:
        return None
    refund = db.get(Refund, parsed_refund_id)
    if refund is None or refund.payment_id != parsed_payment_id:
        return None
    return refund


def refunded_total(db: Session, payment_id) -> int:
    return db.scalar(
        select(func.coalesce(func.sum(Refund.amount), 0)).where(Refund.payment_id == payment_id)
    )


def create_refund(db: Session, payment_id, amount: int) -> RefundResult:
    parsed_id = parse_id(payment_id)
    if parsed_id is None:
        return _reject(Outcome.NOT_REFUNDABLE, payment_id, amount)

    with db.begin():
        payment = db.scalar(select(Payment).where(Payment.id == parsed_id).with_for_update())
        if payment is None or payment.status is not PaymentStatus.APPROVED:
            return _reject(Outcome.NOT_REFUNDABLE, payment_id, amount)
        if amount <= 0 or amount > MAX_AMOUNT:
            return _reject(Outcome.INVALID_REFUND_AMOUNT, payment_id, amount)

        already_refunded = refunded_total(db, parsed_id)
        if already_refunded + amount > payment.amount:
            return _reject(Outcome.EXCESSIVE_REFUND, payment_id, amount, already_refunded=already_refunded)

        refund = Refund(payment_id=parsed_id, amount=amount)
        db.add(refund)

    logger.info(
        "Refund created",
        extra={
            "refund_id": str(refund.id),
            "payment_id": str(parsed_id),
            "amount": amount,
            "refunded_total": already_refunded + amount,
        },
    )
    return RefundResult(Outcome.CREATED, refund)


def _reject(outcome: Outcome, payment_id, amount: int, **context) -> RefundResult:
    logger.info(
        "Refund rejected",
        extra={
            "payment_id": str(payment_id),
            "amount": amount,
            "outcome": outcome.code,
            "category": outcome.category.value,
            **context,
        },
    )
    return RefundResult(outcome)
