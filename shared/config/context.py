from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from shared.config.settings import Settings


@dataclass(frozen=True)
class AppContext:
    """Per-application collaborators, built once at startup and kept on app.state."""

    settings: Settings
    session_factory: async_sessionmaker
    # Only services that emit notifications carry a sink
    notification_sink: Any = None


def get_app_context(request: Request) -> AppContext:
    return request.app.state.context


async def get_db(context: AppContext = Depends(get_app_context)):
    async with context.session_factory() as session:
        yield session
