from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.context import AppContext, get_app_context, get_db
from shared.config.settings import get_settings
from shared.security import get_current_user, get_optional_user, limiter, verify_internal_api_key

from .notifier import NotificationDispatcher
from .schemas import OrderCreate, OrderDetailResponse, OrderResponse, StatusUpdateRequest
from .service import OrderService, parse_shipping_address

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Orders"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)


def get_notifier(context: AppContext = Depends(get_app_context)) -> NotificationDispatcher:
    return NotificationDispatcher(
        context.notification_sink,
        timeout=context.settings.notification_timeout_seconds,
    )


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_settings().order_rate_limit)
async def create_order(
    request: Request,                          # REQUIRED: slowapi needs this to check IP/Headers
    payload: OrderCreate,
    current_user: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    logger.info("order_checkout_requested", requested_by=current_user, user_id=payload.user_id)
    return await OrderService.create_order(db, payload)


# Admin panel: every order, optionally filtered
@router.get("/", response_model=List[OrderResponse], dependencies=[Depends(verify_internal_api_key)])
async def list_orders(
    order_status: Optional[str] = Query(default=None, alias="status"),
    user_id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders(db, status=order_status, user_id=user_id)


@router.get("/user/{user_id}", response_model=List[OrderResponse])
async def list_user_orders(
    user_id: str,
    current_user: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await OrderService.list_orders_for_user(db, user_id)


@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await OrderService.get_order(db, order_id)
    detail = OrderDetailResponse.model_validate(order)
    try:
        detail.shipping_address = parse_shipping_address(order.address)
    except (AttributeError, IndexError) as e:
        # The raw address is still returned
        logger.warning("shipping_address_unparsed", order_id=order.id, error=repr(e))
    return detail


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    payload: StatusUpdateRequest,
    acting_user: Optional[str] = Depends(get_optional_user),
    notifier: NotificationDispatcher = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
):
    # Public endpoint: every request is audit-logged
    logger.info(
        "order_status_update_requested",
        order_id=order_id,
        status=payload.status,
        authenticated=acting_user is not None,
    )
    result = await OrderService.update_status(db, order_id, payload, notifier, acting_user=acting_user)
    return result.order
