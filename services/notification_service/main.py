from fastapi import FastAPI

from shared.config.context import AppContext
from shared.config.database import AsyncSessionLocal, create_schema
from shared.config.settings import get_settings
from shared.errors import register_exception_handlers
from shared.observability import setup_observability

from .models import Notification  # noqa: F401 registers model with SQLAlchemy Base
from .router import internal_router, public_router, router

notification_app = FastAPI(title="Notification Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(notification_app, "notification_service")
register_exception_handlers(notification_app)

notification_app.state.context = AppContext(settings=get_settings(), session_factory=AsyncSessionLocal)

notification_app.include_router(public_router)
notification_app.include_router(internal_router)
notification_app.include_router(router)

@notification_app.on_event("startup")
async def startup_event():
    await create_schema("notification_schema")
