"""Pytest fixtures for the order and notification services."""

import os

# Must be set before any service module builds its engine or limiter
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["NOTIFICATION_TIMEOUT_SECONDS"] = "0.2"

import httpx
import pytest

from main import app
from services.notification_service.schemas import NotificationCreate
from services.order_service.main import order_app
from services.order_service.notifier import NotificationDispatcher
from services.order_service.schemas import OrderCreate
from shared.config.context import AppContext
from shared.config.database import AsyncSessionLocal, Base, engine
from shared.config.settings import get_settings
from shared.security import create_access_token


class RecordingSink:
    """Notification sink that keeps every payload it is handed."""

    def __init__(self):
        self.payloads: list[NotificationCreate] = []

    async def create_notification(self, payload: NotificationCreate) -> None:
        self.payloads.append(payload)


class FailingSink(RecordingSink):
    """Records the attempt, then fails like an unreachable notification store."""

    async def create_notification(self, payload: NotificationCreate) -> None:
        self.payloads.append(payload)
        raise RuntimeError("notification store unavailable")


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Dropping the single in-memory connection gives the next test an empty database
    await engine.dispose()


@pytest.fixture
async def db(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def notifier(sink):
    return NotificationDispatcher(sink, timeout=0.2)


@pytest.fixture
def order_context(sink):
    """Point the mounted order app at the recording sink for the test's duration."""
    original = order_app.state.context
    order_app.state.context = AppContext(
        settings=get_settings(),
        session_factory=AsyncSessionLocal,
        notification_sink=sink,
    )
    yield order_app.state.context
    order_app.state.context = original


@pytest.fixture
async def client(order_context):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _headers


@pytest.fixture
def order_payload():
    def _payload(**overrides) -> dict:
        payload = {
            "customer_name": "Jane Doe",
            "email": "jane@example.com",
            "address": "12 Rose Lane, Pune, Maharashtra - 411001",
            "phone": "+91 98765 43210",
            "items": [{"product": "p-roses", "title": "Roses", "price": 49.99, "quantity": 1}],
            "total": 49.99,
            "user_id": "user-1",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def order_input(order_payload):
    def _input(**overrides) -> OrderCreate:
        return OrderCreate(**order_payload(**overrides))

    return _input


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def internal_headers():
    return {"X-Internal-API-Key": "test-internal-key"}
