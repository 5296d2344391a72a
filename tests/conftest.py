import pytest
import os
import time
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["IDP_JWT_SECRET"] = "test-only-secret"
os.environ["ADMIN_EMAILS"] = "admin@example.com"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SERVER_TIMEZONE"] = "UTC"

from jose import jwt
from leave_service.core.clock import ServerClock
from leave_service.database import Base, get_db
from leave_service.main import app
from leave_service.models.account import AccountRole
from leave_service.services.authorization import Principal
from leave_service.services.balance_ledger import BalanceLedger
from leave_service.services.leave_requests import LeaveRequestStateMachine
from fastapi.testclient import TestClient

TEST_SECRET = "test-only-secret"
DEFAULT_BALANCE = {"annual": 12, "sick": 10, "casual": 8}

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Fresh schema for every test; services commit for real."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def make_token():
    """Mint an ID token the way the identity provider would."""
    def _make_token(uid, email, secret=TEST_SECRET, expires_in=3600, **claims):
        payload = {"sub": uid, "email": email, "exp": int(time.time()) + expires_in, **claims}
        if uid is None:
            payload.pop("sub")
        return jwt.encode(payload, secret, algorithm="HS256")
    return _make_token

@pytest.fixture(scope="function")
def auth_headers(make_token):
    def _auth_headers(uid, email):
        return {"Authorization": f"Bearer {make_token(uid, email)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def employee_headers(auth_headers):
    return auth_headers("emp-a", "alice@example.com")

@pytest.fixture(scope="function")
def other_employee_headers(auth_headers):
    return auth_headers("emp-b", "bob@example.com")

@pytest.fixture(scope="function")
def admin_headers(auth_headers):
    return auth_headers("admin-1", "admin@example.com")

@pytest.fixture(scope="function")
def employee():
    return Principal(id="emp-a", email="alice@example.com", role=AccountRole.EMPLOYEE)

@pytest.fixture(scope="function")
def other_employee():
    return Principal(id="emp-b", email="bob@example.com", role=AccountRole.EMPLOYEE)

@pytest.fixture(scope="function")
def admin():
    return Principal(id="admin-1", email="admin@example.com", role=AccountRole.ADMIN)

@pytest.fixture(scope="function")
def fixed_clock():
    """Server clock frozen at 2024-01-09 09:00 UTC."""
    frozen = datetime(2024, 1, 9, 9, 0, tzinfo=timezone.utc)
    return ServerClock("UTC", source=lambda: frozen)

@pytest.fixture(scope="function")
def ledger(db_session):
    return BalanceLedger(db_session, DEFAULT_BALANCE)

@pytest.fixture(scope="function")
def state_machine(db_session, ledger, fixed_clock):
    return LeaveRequestStateMachine(db_session, ledger, clock=fixed_clock)

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
