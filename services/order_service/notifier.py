"""
Customer notifications derived from order status changes.

Dispatch happens strictly after the order write has committed. It makes a
single attempt, bounded by a timeout, and never raises: the caller only
learns the outcome, which is logged and counted.
"""
import asyncio
import enum
from typing import Optional

import structlog

from services.notification_service.models import NotificationType
from services.notification_service.schemas import NotificationCreate
from shared.observability import ecomm_notification_dispatch_total

from .models import Order, OrderStatus

logger = structlog.get_logger(__name__)


class NotificationOutcome(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # guest order or nothing changed


def short_order_ref(order_id: str) -> str:
    return str(order_id)[-6:]


def build_notification(
    order: Order,
    status: str,
    comment: Optional[str] = None,
    tracking_number: Optional[str] = None,
) -> NotificationCreate:
    prefix = f"Your order #{short_order_ref(order.id)}"

    if status == OrderStatus.PROCESSING.value:
        message = f"{prefix} is now being processed."
        category = NotificationType.ORDER_UPDATE
    elif status == OrderStatus.SHIPPED.value:
        message = f"{prefix} has been shipped."
        if tracking_number:
            message += f" Tracking number: {tracking_number}"
        category = NotificationType.ORDER_SHIPPED
    elif status == OrderStatus.OUT_FOR_DELIVERY.value:
        message = f"{prefix} is out for delivery today!"
        category = NotificationType.DELIVERY_UPDATE
    elif status == OrderStatus.DELIVERED.value:
        message = f"{prefix} has been delivered."
        category = NotificationType.DELIVERY_UPDATE
    elif status == OrderStatus.CANCELLED.value:
        message = f"{prefix} has been cancelled."
        category = NotificationType.ORDER_STATUS
    else:
        message = f"{prefix} status has been updated to {status}."
        category = NotificationType.ORDER_STATUS

    if comment:
        message += f" Note: {comment}"

    return NotificationCreate(user_id=order.user_id, order_id=order.id, message=message, type=category)


class NotificationDispatcher:
    def __init__(self, sink, timeout: float):
        self._sink = sink
        self._timeout = timeout

    async def dispatch(
        self,
        order: Order,
        status: str,
        comment: Optional[str] = None,
        tracking_number: Optional[str] = None,
    ) -> NotificationOutcome:
        log = logger.bind(order_id=order.id, status=status)

        if not order.user_id:
            ecomm_notification_dispatch_total.labels(outcome=NotificationOutcome.SKIPPED.value).inc()
            return NotificationOutcome.SKIPPED

        try:
            payload = build_notification(order, status, comment, tracking_number)
            await asyncio.wait_for(self._sink.create_notification(payload), timeout=self._timeout)
        except Exception as e:
            # A failed notification MUST NOT fail or undo the status update
            log.error("order_notification_failed", user_id=order.user_id, error=repr(e), exc_info=True)
            ecomm_notification_dispatch_total.labels(outcome=NotificationOutcome.FAILED.value).inc()
            return NotificationOutcome.FAILED

        log.info("order_notification_sent", user_id=order.user_id, type=payload.type.value)
        ecomm_notification_dispatch_total.labels(outcome=NotificationOutcome.SENT.value).inc()
        return NotificationOutcome.SENT
