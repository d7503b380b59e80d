from __future__ import annotations

import os

import pytest

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SEED_SAMPLE_DATA"] = "false"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from stock_service import models, schemas  # noqa: E402
from stock_service.codec import BarcodeCodec  # noqa: E402
from stock_service.database import Base, get_db  # noqa: E402
from stock_service.main import app  # noqa: E402
from stock_service.services import DashboardService, ItemService  # noqa: E402
from stock_service.store import ItemStore  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[models.InventoryItem.__table__])
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def codec():
    return BarcodeCodec()


@pytest.fixture()
def store(db_session):
    return ItemStore(db_session)


@pytest.fixture()
def service(store, codec):
    return ItemService(store, codec, default_threshold=10)


@pytest.fixture()
def dashboard(store):
    return DashboardService(store)


@pytest.fixture()
def make_item(service):
    def _make(name="Laptop", quantity=15, category="Electronics", **kwargs):
        return service.create(
            schemas.InventoryItemCreate(name=name, quantity=quantity, category=category, **kwargs)
        )

    return _make


@pytest.fixture()
def client(db_session):
    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
