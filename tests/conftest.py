import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_fintrack.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime, timedelta, UTC
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from fintrack.database import get_db, enable_sqlite_savepoints
from fintrack.dependencies import get_rate_provider
from fintrack.config import settings
from fintrack.core.exceptions import RateUnavailableException
# Import all model classes to ensure they're registered with SQLAlchemy
from fintrack.models import Base, User, TenantMembership, Category
from fintrack.models.role import TenantRole, MembershipStatus
from fintrack.repositories.category_repository import CategoryRepository
from fintrack.repositories.tenant_repository import TenantRepository
from fintrack.services.tenant_provisioner import TenantProvisioner
# Import FastAPI app AFTER model imports
from fintrack.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class StubRateProvider:
    """In-memory RateProvider that records every lookup"""

    def __init__(self, rates: dict[str, Decimal] | None = None):
        self.rates = rates or {}
        self.calls: list[tuple[str, str]] = []

    def get_rate(self, currency: str, base_currency: str) -> Decimal:
        self.calls.append((currency, base_currency))
        if currency not in self.rates:
            raise RateUnavailableException(currency, base_currency, "no stub rate")
        return self.rates[currency]


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def rate_provider():
    return StubRateProvider({"USD": Decimal("1000"), "EUR": Decimal("1100")})


@pytest.fixture(scope="function")
def client(db_session, rate_provider):
    """FastAPI test client with test database and stub FX provider"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_provider] = lambda: rate_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(
    user_id: str = "test-user-123", expired: bool = False, tenant_id: int | None = None
) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        tenant_id: Optional 'tenant_id' claim selecting the active tenant

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user_id: str, tenant_id: int | None = None) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user_id=user_id, tenant_id=tenant_id)}"}


@pytest.fixture
def test_user(db_session):
    """Owner-to-be of the shared tenant"""
    user = User(
        auth_user_id="test-user-123",
        email="owner@example.com",
        display_name="Owner",
        tenant_ids=[],
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def shared_tenant(db_session, test_user):
    """Fully provisioned 'familiar' tenant (4 seats) owned by test_user"""
    tenant_id = TenantProvisioner(db_session).provision(
        test_user, "owner@example.com", "Owner", "familiar"
    )
    return TenantRepository(db_session).get_by_id(tenant_id)


def _add_member(db_session, tenant, auth_user_id: str, role: TenantRole) -> User:
    user = User(auth_user_id=auth_user_id, tenant_ids=[tenant.id])
    db_session.add(user)
    db_session.commit()
    db_session.add(
        TenantMembership(
            tenant_id=tenant.id,
            user_id=user.id,
            role=role,
            status=MembershipStatus.ACTIVE,
            display_name=auth_user_id,
        )
    )
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session, shared_tenant):
    return _add_member(db_session, shared_tenant, "admin-user", TenantRole.ADMIN)


@pytest.fixture
def member_user(db_session, shared_tenant):
    return _add_member(db_session, shared_tenant, "member-user", TenantRole.MEMBER)


@pytest.fixture
def auth_headers(shared_tenant):
    """Authorization headers for the owner of the shared tenant"""
    return headers_for("test-user-123")


@pytest.fixture
def owner_headers(shared_tenant):
    return headers_for("test-user-123", shared_tenant.id)


@pytest.fixture
def admin_headers(admin_user, shared_tenant):
    return headers_for("admin-user", shared_tenant.id)


@pytest.fixture
def member_headers(member_user, shared_tenant):
    return headers_for("member-user", shared_tenant.id)


@pytest.fixture
def food_category(db_session, shared_tenant) -> Category:
    """First seeded category ('Comestibles') of the shared tenant"""
    return CategoryRepository(db_session).get_by_tenant(shared_tenant.id)[0]
