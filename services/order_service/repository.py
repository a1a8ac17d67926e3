from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from .models import Order

class OrderRepository:
    @staticmethod
    async def save(db: AsyncSession, order: Order) -> Order:
        """Upserts the whole order (items and history included) in one commit."""
        db.add(order)
        await db.commit()
        return order

    @staticmethod
    async def find_by_id(db: AsyncSession, order_id: str) -> Optional[Order]:
        result = await db.execute(select(Order).where(Order.id == order_id))
        return result.scalars().first()

    @staticmethod
    async def find(
        db: AsyncSession,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[Order]:
        stmt = select(Order)
        if status is not None:
            stmt = stmt.where(Order.status == status)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        result = await db.execute(stmt.order_by(Order.created_at.desc()))
        return result.scalars().all()
