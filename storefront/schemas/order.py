from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from storefront.models.order import OrderStatus


# Output schema for an individual order line
class OrderItemOut(BaseModel):
    product_id: Optional[int]
    product_name: str
    quantity: int
    price_at_time: float
    line_total: float


# Checkout form: contact, shipping and payment fields
class CheckoutPayload(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str = Field(min_length=1)
    card_number: str
    expiry: str
    cvc: str = Field(pattern=r"^\d{3,4}$")


class ShippingAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    payment_method: Optional[str] = None
    total_amount: float
    total: float
    shipping_address: ShippingAddress
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut]


class CheckoutResponse(BaseModel):
    order: OrderResponse
    redirect_to: str = "/orders"


# Admin table row, no line items
class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: OrderStatus
    payment_method: Optional[str] = None
    total_amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus
