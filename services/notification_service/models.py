import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text
from shared.config.database import Base


class NotificationType(str, enum.Enum):
    ORDER_STATUS = "order_status"
    ORDER_UPDATE = "order_update"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    PAYMENT_CONFIRMED = "payment_confirmed"
    DELIVERY_UPDATE = "delivery_update"
    GENERAL = "general"


def _utcnow():
    return datetime.now(timezone.utc)


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        # Users read their own notifications newest-first
        Index("ix_notifications_user_created", "user_id", "created_at"),
        {"schema": "notification_schema"},
    )

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(64), nullable=False)
    order_id = Column(String(32), nullable=False) # owned by order_service, no FK across schemas
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False, default=NotificationType.ORDER_STATUS.value)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
