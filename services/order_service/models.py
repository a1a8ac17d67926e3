import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from shared.config.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def values(cls) -> list:
        return [member.value for member in cls]


class PaymentMethod(str, enum.Enum):
    CARD = "card"
    UPI = "upi"
    CASH_ON_DELIVERY = "cod"
    WALLET = "wallet"


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"
    # We use a separate schema to simulate microservice isolation
    __table_args__ = {"schema": "order_schema"}

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    customer_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(32), nullable=False)
    total = Column(Float, nullable=False) # pre-computed by the storefront at checkout
    payment_method = Column(String(16), nullable=False, default=PaymentMethod.CASH_ON_DELIVERY.value)
    user_id = Column(String(64), nullable=True, index=True) # null for guest checkout
    tracking_number = Column(String(255), nullable=True)
    status = Column(String(32), nullable=False, default=OrderStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # Insertion order is chronological order for both collections
    items = relationship(
        "OrderItem", back_populates="order", lazy="selectin",
        order_by="OrderItem.id", cascade="all, delete-orphan",
    )
    status_history = relationship(
        "StatusUpdate", back_populates="order", lazy="selectin",
        order_by="StatusUpdate.id", cascade="all, delete-orphan",
    )


class OrderItem(Base):
    """Line-item snapshot: title, price and image are copied at checkout and never change."""

    __tablename__ = "order_items"
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(32), ForeignKey("order_schema.orders.id"), nullable=False, index=True)
    product_id = Column(String(64), nullable=True) # product may be deleted later
    title = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    image = Column(String(1024), nullable=False, default="")

    order = relationship("Order", back_populates="items")


class StatusUpdate(Base):
    """One immutable entry in an order's status history."""

    __tablename__ = "order_status_updates"
    __table_args__ = {"schema": "order_schema"}

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(32), ForeignKey("order_schema.orders.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    time = Column(String(16), nullable=False) # human-readable time of day, e.g. "3:04:05 PM"
    comments = Column(Text, nullable=True)
    updated_by = Column(String(64), nullable=True) # acting user; None for public/system updates

    order = relationship("Order", back_populates="status_history")
