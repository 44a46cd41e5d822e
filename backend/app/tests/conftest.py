"""
Shared fixtures: an in-memory database seeded with one trip and its people.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.money import Money
from app.db.base import Base
from app.db.session import get_db
from app.main import app as fastapi_app
from app.models import Trip, TripCollaborator, User
from app.schemas.expense import ExpenseCreate, SplitInput
from app.services.directory import SqlTripDirectory
from app.services.expense_service import ExpenseService
from app.services.expense_store import ExpenseStore
from app.services.split_allocator import SplitAllocator


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def trip(db):
    """
    Alice owns a 1000 USD trip. Bob and Carol accepted (in that order);
    Dave was invited but never accepted. Erin has nothing to do with it.
    """
    alice = User(username="alice", email="alice@example.com", full_name="Alice Adams")
    bob = User(username="bob", email="bob@example.com", full_name="Bob Brown")
    carol = User(username="carol", email="carol@example.com")
    dave = User(username="dave", email="dave@example.com", full_name="Dave Dunn")
    erin = User(username="erin", email="erin@example.com", full_name="Erin Evans")
    db.add_all([alice, bob, carol, dave, erin])
    db.flush()

    trip = Trip(owner_id=alice.id, name="Lisbon", budget=Money("1000"), currency="USD")
    db.add(trip)
    db.flush()

    accepted = datetime(2024, 5, 1, tzinfo=timezone.utc)
    db.add_all([
        TripCollaborator(trip_id=trip.id, user_id=bob.id, role="editor", accepted_at=accepted),
        TripCollaborator(trip_id=trip.id, user_id=carol.id, role="editor", accepted_at=accepted + timedelta(days=1)),
        TripCollaborator(trip_id=trip.id, user_id=dave.id, role="viewer", accepted_at=None),
    ])
    db.commit()

    return SimpleNamespace(
        id=trip.id,
        alice=alice.id,
        bob=bob.id,
        carol=carol.id,
        dave=dave.id,
        erin=erin.id,
    )


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    fastapi_app.dependency_overrides[get_db] = override_get_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def expense_service(db):
    trip_directory = SqlTripDirectory(db)
    return ExpenseService(
        store=ExpenseStore(db),
        allocator=SplitAllocator(trip_directory),
        trip_directory=trip_directory
    )


@pytest.fixture
def record(expense_service, trip):
    """Create an expense on the seeded trip from (user_id, amount) split pairs."""
    def _record(payer_id, amount, category="food", splits=(), expense_date=date(2024, 5, 10), **extra):
        data = ExpenseCreate(
            payer_id=payer_id,
            amount=Decimal(str(amount)),
            category=category,
            expense_date=expense_date,
            splits=[SplitInput(user_id=user_id, amount=Decimal(str(share))) for user_id, share in splits],
            **extra
        )
        return expense_service.create_expense(trip.id, data)
    return _record
