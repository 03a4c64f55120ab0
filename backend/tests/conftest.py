"""
Pytest fixtures for BuffetDesk backend tests.

Each test gets its own SQLite file, so threads and separate sessions see a
real shared database and nothing leaks between tests.
"""
from datetime import date, time
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from buffetdesk.core.config import Settings
from buffetdesk.core.database import Database
from buffetdesk.main import create_app
from buffetdesk.schemas import ClientCreate, EventCreate, InventoryItemCreate
from buffetdesk.services import ClientService, EventService, InventoryService

TEST_PASSWORD = "party-time-123"


@pytest.fixture(scope='function')
def settings(tmp_path):
    """Settings pointing at a throwaway database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'buffetdesk_test.db'}",
        SECRET_KEY="test-secret-key-that-is-long-enough-for-hs256",
        RATE_LIMIT_ENABLED=False,
        AUTO_CREATE_TABLES=True,
        DB_TIMEOUT_SECONDS=30.0,
    )


@pytest.fixture(scope='function')
def database(settings):
    """Open storage context with all tables created."""
    database = Database(settings).open()
    database.create_all()
    yield database
    database.drop_all()
    database.close()


@pytest.fixture(scope='function')
def db_session(database):
    session = database.new_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def app(settings):
    return create_app(settings)


@pytest.fixture(scope='function')
def client(app):
    """Test client with the app lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope='function')
def auth_client(client):
    """Test client holding a session cookie for a freshly registered user."""
    response = client.post("/api/register", json={
        "username": "maria",
        "password": TEST_PASSWORD,
        "name": "Maria Souza",
    })
    assert response.status_code == 201
    return client


# ==================== DOMAIN FACTORIES ====================

@pytest.fixture(scope='function')
def party_client(db_session):
    """A customer booking parties."""
    return ClientService(db_session).create(ClientCreate(
        name="Ana Lima",
        email="ana@example.com",
        phone="+55 11 99999-0000",
    ))


@pytest.fixture(scope='function')
def make_event(db_session, party_client):
    def _make_event(event_date: date = None, child_name: str = "Pedro", total_value: str = "1500.00"):
        return EventService(db_session).create(EventCreate(
            child_name=child_name,
            age=6,
            client_id=party_client.id,
            event_date=event_date or date(2024, 3, 16),
            start_time=time(14, 0),
            end_time=time(18, 0),
            guest_count=30,
            total_value=Decimal(total_value),
        ))
    return _make_event


@pytest.fixture(scope='function')
def make_item(db_session):
    def _make_item(name: str = "Balloons", initial_stock: int = 0, minimum_stock: int = 10,
                   unit_cost: str = None, category: str = "decorations"):
        return InventoryService(db_session).create(InventoryItemCreate(
            name=name,
            category=category,
            unit="pieces",
            minimum_stock=minimum_stock,
            unit_cost=Decimal(unit_cost) if unit_cost is not None else None,
            initial_stock=initial_stock,
        ))
    return _make_item
