"""
Ways for other services to hand a notification to this service.

The backend is chosen once at startup from NOTIFICATION_SINK:
  - "database": write through NotificationService in a dedicated session,
    independent of the caller's own transaction.
  - "http": POST to the notification service with the internal API key.
"""
from typing import Optional, Protocol

import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker

from shared.config.settings import Settings
from shared.errors import DependencyFailure, StorageError
from shared.security.api_key import internal_headers

from .schemas import NotificationCreate
from .service import NotificationService


class NotificationSink(Protocol):
    async def create_notification(self, payload: NotificationCreate) -> None:
        ...


class DatabaseNotificationSink:
    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create_notification(self, payload: NotificationCreate) -> None:
        async with self._session_factory() as db:
            try:
                await NotificationService.create_notification(db, payload)
            except StorageError as e:
                raise DependencyFailure("Notification store rejected the write") from e


class HttpNotificationSink:
    def __init__(self, base_url: str, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def create_notification(self, payload: NotificationCreate) -> None:
        try:
            async with httpx.AsyncClient(
                headers=internal_headers(), timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(f"{self._base_url}/", json=payload.model_dump(mode="json"))
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise DependencyFailure(f"Notification service call failed: {e}") from e


def build_notification_sink(settings: Settings, session_factory: async_sessionmaker) -> NotificationSink:
    if settings.notification_sink == "http":
        return HttpNotificationSink(settings.notification_url, settings.notification_timeout_seconds)
    if settings.notification_sink == "database":
        return DatabaseNotificationSink(session_factory)
    raise ValueError(f"Unknown NOTIFICATION_SINK: {settings.notification_sink!r}")
