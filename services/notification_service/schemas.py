from datetime import datetime

from pydantic import BaseModel, Field

from .models import NotificationType


class NotificationCreate(BaseModel):
    user_id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.ORDER_STATUS


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    order_id: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAllReadResponse(BaseModel):
    message: str
    modified: int
