"""
Shared fixtures: in-memory database, temporary artifact store, API client
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from invoice_service.config import settings
from invoice_service.database import Base, get_db
from invoice_service.models import Order, User
from invoice_service.repositories import OrderRepository
from invoice_service.storage.artifact_store import ArtifactStore, get_artifact_store

ORDER_ID = "a1b2c3d4e5f6a7b8c9d0"


def example_items():
    return [
        {"productId": "p-1", "name": "Widget", "price": 10.00, "quantity": 2, "imageUrl": ""},
        {"productId": "p-2", "name": "Gadget", "price": 5.50, "quantity": 1, "imageUrl": ""},
    ]


def example_address():
    return {"address": "1 Main St", "city": "Springfield", "zipCode": "12345", "phone": "555-0100"}


@pytest.fixture
def make_payload():
    """Factory for camelCase order snapshots as checkout writes them"""
    def _make(**overrides):
        payload = {
            "id": ORDER_ID,
            "userId": "user-1",
            "userEmail": "alice@example.com",
            "items": example_items(),
            "totalAmount": 25.50,
            "shippingAddress": example_address(),
            "status": "pending",
            "invoiceUrl": "",
            "createdAt": "2024-03-14T10:00:00+00:00",
        }
        payload.update(overrides)
        return payload
    return _make


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
def store(tmp_path):
    store = ArtifactStore(
        base_dir=str(tmp_path / "artifacts"),
        signing_secret="test-artifact-secret",
        public_base_url="http://testserver",
        url_ttl=timedelta(days=settings.INVOICE_URL_TTL_DAYS)
    )
    store.ensure_base_dir()
    return store


@pytest.fixture
def make_order(db):
    """Insert an order row the way checkout would"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "id": f"order{counter['n']:04d}abcdef",
            "user_id": "user-1",
            "user_email": "alice@example.com",
            "items": example_items(),
            "total_amount": Decimal("25.50"),
            "shipping_address": example_address(),
            "status": "pending",
            "created_at": datetime(2024, 3, 14, 10, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        return OrderRepository(db).create(fields)
    return _make


@pytest.fixture
def make_user(db):
    def _make(user_id: str, role: str = "customer"):
        user = User(id=user_id, email=f"{user_id}@example.com", name=user_id, role=role)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def reload_order(db):
    def _reload(order_id: str) -> Order:
        db.expire_all()
        return db.query(Order).filter(Order.id == order_id).one()
    return _reload


@pytest.fixture
def auth_headers():
    def _headers(user_id: str, expires_in: timedelta = timedelta(hours=1)):
        token = jwt.encode(
            {"sub": user_id, "exp": datetime.now(timezone.utc) + expires_in},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def client(session_factory, store):
    from invoice_service.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_artifact_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
