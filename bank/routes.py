from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from bank import payments, refunds
from bank.accounts import AccountsGateway, DummyAccountsService
from bank.database import get_db
from bank.errors import Outcome
from bank.schemas import (
    ErrorResponse,
    PaymentData,
    PaymentRequest,
    PaymentResponse,
    RefundData,
    RefundRequest,
    RefundResponse,
)

router = APIRouter()

_accounts_service = DummyAccountsService()


def get_accounts_gateway() -> AccountsGateway:
    return _accounts_service


def _error(outcome: Outcome) -> JSONResponse:
    return JSONResponse(status_code=outcome.status_code, content=ErrorResponse(error=outcome.message).model_dump())


def _payment_body(payment, status_code: int) -> JSONResponse:
    body = PaymentResponse(data=PaymentData.model_validate(payment))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _refund_body(refund, status_code: int) -> JSONResponse:
    body = RefundResponse(data=RefundData.model_validate(refund))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@router.post(
    "/payments",
    status_code=201,
    response_model=PaymentResponse,
    responses={
        204: {"description": "Zero amount"},
        400: {"model": ErrorResponse},
        402: {"model": PaymentResponse},
        403: {"model": PaymentResponse},
        422: {"model": ErrorResponse},
        500: {"model": PaymentResponse},
        503: {"model": PaymentResponse},
    },
)
def create_payment_api(
    request: PaymentRequest,
    db: Session = Depends(get_db),
    gateway: AccountsGateway = Depends(get_accounts_gateway),
):
    result = payments.create_payment(db, gateway, request.payment.amount, request.payment.card_number)

    # declined and failed payments are persisted too and answered with their body
    if result.payment is not None:
        return _payment_body(result.payment, result.outcome.status_code)
    if result.outcome is Outcome.REJECTED_ZERO:
        return Response(status_code=204)
    return _error(result.outcome)


@router.get("/payments/{payment_id}", response_model=PaymentResponse, responses={404: {"model": ErrorResponse}})
def get_payment_api(payment_id: str, db: Session = Depends(get_db)):
    payment = payments.get_payment(db, payment_id)
    if payment is None:
        return JSONResponse(status_code=404, content={"error": "payment doesn't exist"})
    return _payment_body(payment, 200)


@router.post(
    "/payments/{payment_id}/refunds",
    status_code=201,
    response_model=RefundResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_refund_api(payment_id: str, request: RefundRequest, db: Session = Depends(get_db)):
    result = refunds.create_refund(db, payment_id, request.refund.amount)
    if result.outcome.is_error:
        return _error(result.outcome)
    return _refund_body(result.refund, result.outcome.status_code)


@router.get(
    "/payments/{payment_id}/refunds/{refund_id}",
    response_model=RefundResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_refund_api(payment_id: str, refund_id: str, db: Session = Depends(get_db)):
    refund = refunds.get_refund(db, payment_id, refund_id)
    if refund is None:
        return JSONResponse(status_code=404, content={"error": "refund doesn't exist"})
    return _refund_body(refund, 200)
