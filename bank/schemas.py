import uuid

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from bank.models import MAX_AMOUNT, PaymentStatus


class PaymentRequestData(BaseModel):
    # negative amounts are answered by the processor, only the storage ceiling applies here
    amount: StrictInt = Field(..., le=MAX_AMOUNT, examples=[1045])
    card_number: str = Field(..., examples=["123451234512345"])


class PaymentRequest(BaseModel):
    payment: PaymentRequestData


class PaymentData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: int
    card_number: str
    status: PaymentStatus


class PaymentResponse(BaseModel):
    data: PaymentData


class RefundRequestData(BaseModel):
    amount: StrictInt = Field(..., examples=[200])


class RefundRequest(BaseModel):
    refund: RefundRequestData


class RefundData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    amount: int
    payment_id: uuid.UUID


class RefundResponse(BaseModel):
    data: RefundData


class ErrorResponse(BaseModel):
    error: str
