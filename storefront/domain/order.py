"""
Order Domain Models

Represents orders, their denormalized line items and the checkout input.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderStatus(str, Enum):
    """
    Order lifecycle

    pending → confirmed → processing → shipped → delivered, with cancelled and
    refunded reachable from any non-terminal status.
    """
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    def can_transition_to(self, target: "OrderStatus") -> bool:
        if self.is_terminal:
            return False
        if target in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            return True
        return _NEXT_STATUS.get(self) == target


_TERMINAL_STATUSES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}

_NEXT_STATUS = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PROCESSING,
    OrderStatus.PROCESSING: OrderStatus.SHIPPED,
    OrderStatus.SHIPPED: OrderStatus.DELIVERED,
}


class ShippingAddress(BaseModel):
    """Structured shipping address stored as JSONB on the order"""
    recipient_name: str = Field(..., min_length=1)
    recipient_phone: str = Field(..., min_length=1, pattern=r"^[0-9-]+$")
    postal_code: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    detail_address: Optional[str] = None

    @field_validator("recipient_name", "postal_code", "address")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class OrderItem(BaseModel):
    """
    Order line item

    product_name and price are copied from the product when the order is
    placed, so later catalog changes don't alter historical orders.
    """
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    product_name: str
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    created_at: Optional[datetime] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """Order header with its (optionally loaded) line items"""
    id: str
    clerk_id: str
    total_amount: Decimal = Field(..., ge=0)
    status: OrderStatus = OrderStatus.PENDING
    shipping_address: Optional[ShippingAddress] = None
    order_note: Optional[str] = None
    idempotency_key: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = []

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class CreateOrderInput(BaseModel):
    """Checkout input: where to ship, an optional note and dedup key"""
    shipping_address: ShippingAddress
    order_note: Optional[str] = None
    idempotency_key: Optional[str] = Field(None, max_length=128)

    @field_validator("order_note", "idempotency_key")
    @classmethod
    def empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value
