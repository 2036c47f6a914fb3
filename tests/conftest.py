import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bistro.core.database import Base, SessionLocal, get_db
from bistro.core.metrics import service_metrics
from bistro.payments.service import PaymentService, get_payment_service
from bistro.realtime.feeds import bind_feeds
from bistro.services.tables import move_throttle
import bistro.models  # noqa: F401
import bistro.services.event_handlers  # noqa: F401


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    bind_feeds(TestingSessionLocal)
    move_throttle.reset()
    service_metrics.reset()

    yield TestingSessionLocal

    bind_feeds(SessionLocal)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def payments():
    return PaymentService(provider_name="mock")


@pytest.fixture
def client(db, payments, monkeypatch):
    from bistro import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)
    main.app.dependency_overrides[get_db] = lambda: db
    main.app.dependency_overrides[get_payment_service] = lambda: payments

    with TestClient(main.app) as test_client:
        yield test_client

    main.app.dependency_overrides.clear()


@pytest.fixture
def seeded_menu(client):
    from tests.fixtures_data import MENU_SEED

    category_ids = {}
    for category in MENU_SEED["categories"]:
        response = client.post("/api/menu/categories", json=category)
        category_ids[category["name"]] = response.json()["id"]

    item_ids = {}
    for item in MENU_SEED["items"]:
        payload = {key: value for key, value in item.items() if key != "category"}
        payload["category_id"] = category_ids[item["category"]]
        response = client.post("/api/menu/items", json=payload)
        item_ids[item["name"]] = response.json()["id"]

    return {"categories": category_ids, "items": item_ids}
