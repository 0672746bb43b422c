import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, String, Uuid
from bank.database import Base


# amounts are stored in 32-bit integer columns
MAX_AMOUNT = 2 ** 31 - 1


def _utcnow():
    return datetime.now(timezone.utc)


class PaymentStatus(str, enum.Enum):
    PROCESSING = "processing"
    APPROVED = "approved"
    DECLINED = "declined"
    FAILED = "failed"


class Payment(Base):
    """
    A payment made with a single-use card.

    Once persisted as approved, the merchant is guaranteed to be paid and may
    release the goods. Rows are written once and never updated.
    """

    __tablename__ = "payments"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    amount = Column(Integer, nullable=False)
    card_number = Column(String(15), nullable=False, unique=True)
    status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    hold_id = Column(Uuid, nullable=True)                 # backing hold of approved payments
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Refund(Base):
    """
    A partial or full refund of an approved payment.

    A persisted refund is effective: the customer gets the money back.
    Several refunds may target one payment, but their sum never exceeds
    the payment amount.
    """

    __tablename__ = "refunds"
    __table_args__ = (CheckConstraint("amount > 0", name="ck_refunds_amount_positive"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    payment_id = Column(Uuid, ForeignKey("payments.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
