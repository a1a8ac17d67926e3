from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from services.notification_service.sinks import build_notification_sink
from shared.config.context import AppContext
from shared.config.database import AsyncSessionLocal, create_schema
from shared.config.settings import get_settings
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter
from .router import router, public_router
from .models import Order # Import to register with Base

order_app = FastAPI(title="Order Service", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(order_app, "order_service")

# --- ERROR + SECURITY SETUP ---
register_exception_handlers(order_app)
order_app.state.limiter = limiter
order_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Collaborators are chosen once here, never toggled at runtime
_settings = get_settings()
order_app.state.context = AppContext(
    settings=_settings,
    session_factory=AsyncSessionLocal,
    notification_sink=build_notification_sink(_settings, AsyncSessionLocal),
)

order_app.include_router(public_router)
order_app.include_router(router)

@order_app.on_event("startup")
async def startup_event():
    await create_schema("order_schema")
