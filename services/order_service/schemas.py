from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from .models import PaymentMethod


class OrderItemIn(BaseModel):
    # Every field is optional: the storefront cart may send partial items,
    # and missing values are filled with defaults at checkout.
    product: Optional[str] = None
    title: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    image: Optional[str] = None


class OrderCreate(BaseModel):
    # Required fields are Optional here so that the service can report every
    # missing one at once instead of failing on the first.
    customer_name: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None
    total: Optional[float] = None
    user_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None


class StatusUpdateRequest(BaseModel):
    status: str
    comment: Optional[str] = None
    tracking_number: Optional[str] = None


class OrderItemResponse(BaseModel):
    product_id: Optional[str]
    title: str
    price: float
    quantity: int
    image: str

    class Config:
        from_attributes = True


class StatusUpdateResponse(BaseModel):
    status: str
    date: datetime
    time: str
    comments: Optional[str]
    updated_by: Optional[str]

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    customer_name: str
    email: str
    address: str
    phone: str
    items: List[OrderItemResponse] = []
    total: float
    payment_method: str
    user_id: Optional[str]
    tracking_number: Optional[str]
    status: str
    status_history: List[StatusUpdateResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ShippingAddress(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "India"


class OrderDetailResponse(OrderResponse):
    shipping_address: Optional[ShippingAddress] = None
