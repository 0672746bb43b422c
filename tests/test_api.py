import pytest

from bank.accounts import HoldResult
from bank.models import Payment
from conftest import TestingSessionLocal, new_card_number


def post_payment(client, amount, card_number):
    return client.post("/payments", json={"payment": {"amount": amount, "card_number": card_number}})


def post_refund(client, payment_id, amount):
    return client.post(f"/payments/{payment_id}/refunds", json={"refund": {"amount": amount}})


def test_create_payment_success(client, gateway):
    response = post_payment(client, 1045, "123451234512345")

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["amount"] == 1045
    assert data["card_number"] == "123451234512345"
    assert data["status"] == "approved"
    assert gateway.holds == [("123451234512345", 1045)]


def test_create_payment_with_used_card(client, gateway):
    post_payment(client, 1045, "123451234512345")

    response = post_payment(client, 1045, "123451234512345")

    assert response.status_code == 422
    assert response.json() == {"error": "card_number already used"}
    assert len(gateway.holds) == 1


@pytest.mark.parametrize("amount", [-5, -(2 ** 31), -(2 ** 31) - 1])
def test_create_payment_negative_amount(client, gateway, amount):
    response = post_payment(client, amount, new_card_number())

    assert response.status_code == 400
    assert "error" in response.json()
    assert gateway.holds == []


def test_create_payment_zero_amount(client, gateway):
    response = post_payment(client, 0, new_card_number())

    assert response.status_code == 204
    assert response.content == b""
    assert gateway.holds == []


@pytest.mark.parametrize("card_number", ["1234", "12345123451234Z", "1234512345123456"])
def test_create_payment_bad_card_format(client, gateway, card_number):
    response = post_payment(client, 1045, card_number)

    assert response.status_code == 422
    assert response.json() == {"error": "Bad Card Number format"}
    assert gateway.holds == []


@pytest.mark.parametrize(
    "hold_result,status_code,status",
    [
        (HoldResult.INSUFFICIENT_FUNDS, 402, "declined"),
        (HoldResult.INVALID_ACCOUNT_NUMBER, 403, "declined"),
        (HoldResult.SERVICE_UNAVAILABLE, 503, "failed"),
        (HoldResult.INTERNAL_ERROR, 500, "failed"),
    ],
)
def test_create_payment_not_approved(client, gateway, hold_result, status_code, status):
    gateway.result = hold_result

    response = post_payment(client, 1205, new_card_number())

    assert response.status_code == status_code
    data = response.json()["data"]
    assert data["status"] == status
    assert data["amount"] == 1205

    db = TestingSessionLocal()
    stored = db.query(Payment).filter_by(card_number=data["card_number"]).first()
    assert stored.status.value == status
    db.close()


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"payment": {"amount": 1045}},
        {"payment": {"card_number": "123451234512345"}},
        {"payment": {"amount": "lots", "card_number": "123451234512345"}},
        {"payment": {"amount": 2 ** 31, "card_number": "123451234512345"}},
        {"payment": {"amount": 1045, "card_number": 123451234512345}},
        {"payment": {"amount": "1045", "card_number": "123451234512345"}},
        {"payment": {"amount": 1045.0, "card_number": "123451234512345"}},
    ],
)
def test_create_payment_malformed_body(client, gateway, body):
    response = client.post("/payments", json=body)

    assert response.status_code == 422
    assert gateway.holds == []


def test_refund_sequence_up_to_payment_amount(client):
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]

    for amount in (200, 500, 300):
        response = post_refund(client, payment_id, amount)
        assert response.status_code == 201
        assert response.json()["data"]["amount"] == amount
        assert response.json()["data"]["payment_id"] == payment_id


def test_refund_excessive_amount(client):
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]
    assert post_refund(client, payment_id, 200).status_code == 201

    response = post_refund(client, payment_id, 900)

    assert response.status_code == 422
    assert response.json() == {"error": "excessive refund amount requested"}


@pytest.mark.parametrize("amount", [0, -10, 2 ** 31])
def test_refund_amount_out_of_range(client, amount):
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]

    response = post_refund(client, payment_id, amount)

    assert response.status_code == 422


def test_refund_declined_payment(client, gateway):
    gateway.result = HoldResult.INSUFFICIENT_FUNDS
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]

    response = post_refund(client, payment_id, 100)

    assert response.status_code == 404


@pytest.mark.parametrize("payment_id", ["8f4c1bde-2f4a-4a8e-9a41-64f0c7f3b7a1", "unknown"])
def test_refund_unknown_payment(client, payment_id):
    response = post_refund(client, payment_id, 100)

    assert response.status_code == 404
    assert "error" in response.json()


@pytest.mark.parametrize("amount", [100, 0, -(2 ** 31) - 1, 2 ** 31])
def test_refund_unknown_payment_whatever_the_amount(client, amount):
    response = post_refund(client, "8f4c1bde-2f4a-4a8e-9a41-64f0c7f3b7a1", amount)

    assert response.status_code == 404


@pytest.mark.parametrize("amount", [100, 2 ** 31])
def test_refund_declined_payment_whatever_the_amount(client, gateway, amount):
    gateway.result = HoldResult.INVALID_ACCOUNT_NUMBER
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]

    response = post_refund(client, payment_id, amount)

    assert response.status_code == 404


@pytest.mark.parametrize("amount", ["200", 200.0, None])
def test_refund_non_integer_amount(client, amount):
    payment_id = post_payment(client, 1000, new_card_number()).json()["data"]["id"]

    response = post_refund(client, payment_id, amount)

    assert response.status_code == 422
