import os
import random
import threading

# Keep the app's own engine away from any developer database
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_default.db")

import pytest
from fastapi.testclient import TestClient

from bank.accounts import AccountsGateway, HoldRef, HoldResponse, HoldResult
from bank.cards import ACCOUNT_PREFIX_LENGTH, CARD_NUMBER_LENGTH
from bank.database import Base, create_ledger_engine, create_session_factory, get_db
from bank.main import app as fastapi_app
from bank.routes import get_accounts_gateway
import bank.models  # noqa: F401

# Setup test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_temp.db"
engine = create_ledger_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = create_session_factory(engine)


class RecordingGateway(AccountsGateway):
    """Accounts gateway double that answers with a fixed result and records every call."""

    def __init__(self, result=HoldResult.APPROVED, barrier=None):
        self.result = result
        self.barrier = barrier
        self.holds = []
        self.withdrawn = []
        self.released = []
        self._lock = threading.Lock()

    def hold(self, card_number, amount):
        with self._lock:
            self.holds.append((card_number, amount))
        if self.barrier is not None:
            self.barrier.wait(timeout=10)
        hold = HoldRef() if self.result is HoldResult.APPROVED else None
        return HoldResponse(self.result, hold)

    def withdraw(self, hold):
        with self._lock:
            self.withdrawn.append(hold)

    def release(self, hold):
        with self._lock:
            self.released.append(hold)


def new_card_number(account_number=None):
    if account_number is None:
        account_number = f"{random.randint(1, 99):0{ACCOUNT_PREFIX_LENGTH}d}"
    suffix_length = CARD_NUMBER_LENGTH - ACCOUNT_PREFIX_LENGTH
    return f"{account_number}{random.randrange(10 ** suffix_length):0{suffix_length}d}"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def client(gateway):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_accounts_gateway] = lambda: gateway
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
