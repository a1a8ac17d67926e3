"""
Order lifecycle: checkout, status transitions with an append-only history,
and the customer notification that follows a change.

Statuses form a flat set. Any status may follow any other; Delivered and
Cancelled are terminal only in the sense that nothing is triggered after
them. The current status always equals the status of the last history entry.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError, StorageError, ValidationError
from shared.observability import ecomm_orders_created_total, ecomm_order_status_transitions_total

from .models import Order, OrderItem, OrderStatus, PaymentMethod, StatusUpdate
from .notifier import NotificationDispatcher, NotificationOutcome
from .repository import OrderRepository
from .schemas import OrderCreate, OrderItemIn, ShippingAddress, StatusUpdateRequest

logger = structlog.get_logger(__name__)

REQUIRED_ORDER_FIELDS = ("customer_name", "email", "address", "phone", "items", "total")
INITIAL_STATUS_COMMENT = "Order received and is being processed."
UNKNOWN_PRODUCT_TITLE = "Unknown Product"


@dataclass(frozen=True)
class StatusUpdateResult:
    order: Order
    changed: bool
    notification: NotificationOutcome


def time_of_day(moment: datetime) -> str:
    """'3:04:05 PM' style time on the server's local clock, as shown in the order history."""
    return moment.astimezone().strftime("%I:%M:%S %p").lstrip("0")


def parse_shipping_address(address: str) -> ShippingAddress:
    """Split the checkout address line "street, city, state - zip" into parts."""
    parts = address.split(",")
    street = parts[0].strip() if parts else ""
    city = parts[1].strip() if len(parts) > 1 else ""
    state = zip_code = ""
    if len(parts) > 2:
        state_zip = parts[2].split("-")
        state = state_zip[0].strip()
        zip_code = state_zip[1].strip() if len(state_zip) > 1 else ""
    return ShippingAddress(street=street, city=city, state=state, zip_code=zip_code)


class OrderService:

    @staticmethod
    def _missing_fields(data: OrderCreate) -> List[str]:
        missing = []
        for name in REQUIRED_ORDER_FIELDS:
            value = getattr(data, name)
            if value is None:
                missing.append(name)
            elif isinstance(value, str) and not value.strip():
                missing.append(name)
            elif isinstance(value, list) and not value:
                missing.append(name)
        return missing

    @staticmethod
    def _snapshot_items(items: List[OrderItemIn]) -> List[OrderItem]:
        invalid = {}
        snapshots = []
        for index, item in enumerate(items):
            # Partial cart items are accepted and filled with defaults
            quantity = item.quantity or 1
            price = item.price if item.price is not None else 0.0
            if quantity < 1:
                invalid[f"items.{index}.quantity"] = "must be at least 1"
            if price < 0:
                invalid[f"items.{index}.price"] = "must not be negative"
            snapshots.append(
                OrderItem(
                    product_id=item.product or None,
                    title=item.title or UNKNOWN_PRODUCT_TITLE,
                    price=price,
                    quantity=quantity,
                    image=item.image or "",
                )
            )
        if invalid:
            raise ValidationError("Invalid order items", invalid_fields=invalid)
        return snapshots

    @staticmethod
    async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
        missing = OrderService._missing_fields(data)
        if missing:
            raise ValidationError("Missing required fields", missing_fields=missing)
        if data.total < 0:
            raise ValidationError("Invalid order total", invalid_fields={"total": "must not be negative"})

        items = OrderService._snapshot_items(data.items)
        now = datetime.now(timezone.utc)
        payment_method = data.payment_method or PaymentMethod.CASH_ON_DELIVERY

        order = Order(
            customer_name=data.customer_name,
            email=data.email,
            address=data.address,
            phone=data.phone,
            total=data.total,
            payment_method=payment_method.value,
            user_id=data.user_id or None,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            items=items,
            status_history=[
                StatusUpdate(
                    status=OrderStatus.PENDING.value,
                    date=now,
                    time=time_of_day(now),
                    comments=INITIAL_STATUS_COMMENT,
                    updated_by=None,
                )
            ],
        )

        try:
            order = await OrderRepository.save(db, order)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("Failed to create order") from e

        ecomm_orders_created_total.labels(payment_method=order.payment_method).inc()
        logger.info(
            "order_created",
            order_id=order.id,
            user_id=order.user_id,
            items=len(order.items),
            total=order.total,
        )
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: str) -> Order:
        try:
            order = await OrderRepository.find_by_id(db, order_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to fetch order") from e
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    @staticmethod
    async def list_orders(
        db: AsyncSession,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[Order]:
        if status is not None and status not in OrderStatus.values():
            raise ValidationError("Invalid status", valid_options=OrderStatus.values())
        try:
            return await OrderRepository.find(db, status=status, user_id=user_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to fetch orders") from e

    @staticmethod
    async def list_orders_for_user(db: AsyncSession, user_id: str) -> Sequence[Order]:
        return await OrderService.list_orders(db, user_id=user_id)

    @staticmethod
    async def update_status(
        db: AsyncSession,
        order_id: str,
        data: StatusUpdateRequest,
        notifier: NotificationDispatcher,
        acting_user: Optional[str] = None,
    ) -> StatusUpdateResult:
        if data.status not in OrderStatus.values():
            raise ValidationError("Invalid status", valid_options=OrderStatus.values())

        order = await OrderService.get_order(db, order_id)
        tracking_number = data.tracking_number or None

        status_changed = order.status != data.status
        tracking_changed = tracking_number is not None and order.tracking_number != tracking_number
        if not (status_changed or tracking_changed):
            # Redundant client retries must not pollute the history
            logger.info("order_status_unchanged", order_id=order.id, status=order.status)
            return StatusUpdateResult(order=order, changed=False, notification=NotificationOutcome.SKIPPED)

        comments = data.comment or ""
        if tracking_number is not None and not order.tracking_number:
            comments = f"{comments} Tracking number: {tracking_number}".strip()

        now = datetime.now(timezone.utc)
        previous_status = order.status
        order.status = data.status
        if tracking_number is not None:
            order.tracking_number = tracking_number
        order.updated_at = now
        order.status_history.append(
            StatusUpdate(
                status=data.status,
                date=now,
                time=time_of_day(now),
                comments=comments or None,
                updated_by=acting_user,
            )
        )

        try:
            order = await OrderRepository.save(db, order)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("Failed to update order status") from e

        ecomm_order_status_transitions_total.labels(status=data.status).inc()
        logger.info(
            "order_status_updated",
            order_id=order.id,
            previous_status=previous_status,
            status=order.status,
            tracking_number=order.tracking_number,
            updated_by=acting_user,
        )

        # Only after the commit: the notification can never roll back the order
        outcome = await notifier.dispatch(order, data.status, data.comment, tracking_number)
        return StatusUpdateResult(order=order, changed=True, notification=outcome)
