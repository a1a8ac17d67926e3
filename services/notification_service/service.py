from typing import Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import NotFoundError, PermissionDenied, StorageError

from .models import Notification
from .repository import NotificationRepository
from .schemas import NotificationCreate

logger = structlog.get_logger(__name__)

# Keeps the notification bell from overwhelming the client
USER_NOTIFICATION_LIMIT = 20


class NotificationService:

    @staticmethod
    async def create_notification(db: AsyncSession, data: NotificationCreate) -> Notification:
        notification = Notification(
            user_id=data.user_id,
            order_id=data.order_id,
            message=data.message,
            type=data.type.value,
            is_read=False,
        )
        try:
            notification = await NotificationRepository.create(db, notification)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("Failed to create notification") from e

        logger.info(
            "notification_created",
            notification_id=notification.id,
            user_id=notification.user_id,
            order_id=notification.order_id,
            type=notification.type,
        )
        return notification

    @staticmethod
    async def list_for_user(db: AsyncSession, user_id: str) -> Sequence[Notification]:
        try:
            return await NotificationRepository.list_for_user(db, user_id, USER_NOTIFICATION_LIMIT)
        except SQLAlchemyError as e:
            raise StorageError("Failed to fetch notifications") from e

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: str, user_id: str) -> Notification:
        try:
            notification = await NotificationRepository.get_by_id(db, notification_id)
        except SQLAlchemyError as e:
            raise StorageError("Failed to update notification") from e

        if notification is None:
            raise NotFoundError("Notification", notification_id)
        if notification.user_id != user_id:
            raise PermissionDenied("Not authorized to modify this notification")

        notification.is_read = True
        try:
            return await NotificationRepository.save(db, notification)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("Failed to update notification") from e

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: str) -> int:
        try:
            modified = await NotificationRepository.mark_all_read(db, user_id)
        except SQLAlchemyError as e:
            await db.rollback()
            raise StorageError("Failed to update notifications") from e
        logger.info("notifications_marked_read", user_id=user_id, modified=modified)
        return modified
