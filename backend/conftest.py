"""Shared fixtures: in-memory database, API client, product builder."""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PRINTER_DEVICE"] = ""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmabill.api.deps import clear_billing_sessions, get_session_factory
from pharmabill.db.init_db import init_db
from pharmabill.main import app
from pharmabill.schemas.product import ProductRecord, Schedule


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    clear_billing_sessions()
    yield TestClient(app)
    app.dependency_overrides.clear()
    clear_billing_sessions()


@pytest.fixture
def make_product():
    """Build a ProductRecord; ids auto-increment unless given."""
    counter = {"next_id": 1}

    def _make(name="Dolo 650", rate="22.50", schedule=Schedule.GENERAL, expiry="2027-01-31", **fields):
        if "id" not in fields:
            fields["id"] = counter["next_id"]
            counter["next_id"] += 1
        return ProductRecord(
            name=name,
            rate=Decimal(str(rate)),
            ptr=Decimal(str(rate)),
            schedule=schedule,
            expiry=expiry,
            **fields,
        )

    return _make
