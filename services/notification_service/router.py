"""
Internal callers (the order service's HTTP sink) create notifications with
the X-Internal-API-Key header. End users can only read and acknowledge
their own notifications.
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.context import get_db
from shared.errors import PermissionDenied
from shared.security.dependencies import get_current_user, verify_internal_api_key

from .schemas import MarkAllReadResponse, NotificationCreate, NotificationResponse
from .service import NotificationService

internal_router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
router = APIRouter(tags=["Notifications"])
public_router = APIRouter()  # For any public endpoints (e.g. health check)


def _ensure_owner(user_id: str, current_user: str) -> None:
    if current_user != user_id:
        raise PermissionDenied("Not authorized to access these notifications")


@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "notification", "status": "running"}


@internal_router.post("/", response_model=NotificationResponse, status_code=status.HTTP_201_CREATED)
async def create_notification(payload: NotificationCreate, db: AsyncSession = Depends(get_db)):
    return await NotificationService.create_notification(db, payload)


@router.get("/user/{user_id}", response_model=List[NotificationResponse])
async def list_user_notifications(
    user_id: str,
    current_user: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _ensure_owner(user_id, current_user)
    return await NotificationService.list_for_user(db, user_id)


@router.put("/user/{user_id}/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_id: str,
    current_user: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _ensure_owner(user_id, current_user)
    modified = await NotificationService.mark_all_read(db, user_id)
    return MarkAllReadResponse(message="All notifications marked as read", modified=modified)


@router.put("/notification/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: str,
    current_user: str = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await NotificationService.mark_read(db, notification_id, current_user)
