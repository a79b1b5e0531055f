"""
Pydantic schemas for order snapshots and order events
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, Literal, List
from datetime import datetime
from decimal import Decimal


class CamelModel(BaseModel):
    """Base schema accepting both snake_case and camelCase keys"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class OrderItemSnapshot(CamelModel):
    """Single line item as captured at checkout"""
    product_id: Optional[str] = None
    name: str
    price: Decimal = Field(..., ge=0, description="Unit price")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    image_url: Optional[str] = None


class ShippingAddress(CamelModel):
    """Shipping address block"""
    address: str
    city: str
    zip_code: str
    phone: str


class OrderSnapshot(CamelModel):
    """Read-only view of an order used to render the invoice"""
    id: str = Field(..., min_length=1)
    user_id: str
    user_email: str = Field(..., min_length=1)
    items: List[OrderItemSnapshot]
    total_amount: Decimal
    shipping_address: ShippingAddress
    status: Literal['pending', 'processing', 'shipped', 'delivered', 'cancelled'] = 'pending'
    created_at: Optional[datetime] = None


class OrderCreatedData(CamelModel):
    """Payload of an OrderCreated event; only the id is trusted"""
    id: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    status: Optional[str] = None
    invoice_url: Optional[str] = ""


class OrderCreatedEvent(BaseModel):
    """Schema for OrderCreated event envelope"""
    event_type: Literal["OrderCreated"]
    event_id: str
    event_version: str = "1.0"
    timestamp: Optional[str] = None
    source: Optional[str] = None
    data: OrderCreatedData
