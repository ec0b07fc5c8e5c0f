"""
Pricebook - Test Configuration and Fixtures
"""
import os
from typing import Generator

import pytest

# Set testing environment before the settings object is created
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['JWT_SECRET'] = 'test-jwt-secret-for-testing-only'
os.environ['LOG_LEVEL'] = 'WARNING'

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from pricebook.core.auth import create_access_token, get_password_hash
from pricebook.core.database import Base, get_db
from pricebook.models import Admin
from pricebook.services.catalog import DEFAULT_CATALOG
from pricebook.services.override_store import InMemoryOverrideRepository
from pricebook.services.pricing_engine import PriceEventBus, PricingEngine

ADMIN_PASSWORD = 'adminpassword123'


@pytest.fixture(scope='function')
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database for each test"""
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client with the database dependency overridden"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db_session: Session) -> Admin:
    """Create an admin user"""
    admin = Admin(
        name='Test Admin',
        email='admin@example.com',
        password=get_password_hash(ADMIN_PASSWORD),
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def auth_headers(admin_user: Admin) -> dict:
    """Bearer headers for the admin user"""
    token = create_access_token({
        'admin_id': admin_user.id,
        'email': admin_user.email,
        'name': admin_user.name,
    })
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def event_bus() -> PriceEventBus:
    return PriceEventBus()


@pytest.fixture
def repository() -> InMemoryOverrideRepository:
    return InMemoryOverrideRepository()


@pytest.fixture
def engine(repository: InMemoryOverrideRepository, event_bus: PriceEventBus) -> PricingEngine:
    """Pricing engine over an in-memory store with its own event bus"""
    return PricingEngine(repository, DEFAULT_CATALOG, events=event_bus)


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD
