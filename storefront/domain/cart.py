"""
Cart Domain Models

A cart line joins the cart_items row with the current state of its product.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.domain.product import Product


class CartItem(BaseModel):
    """One (product, quantity) line in a user's cart"""

    id: str
    clerk_id: str
    product_id: str
    quantity: int = Field(..., ge=1)
    created_at: datetime
    updated_at: Optional[datetime] = None
    product: Product

    @property
    def subtotal(self) -> Decimal:
        """product.price * quantity"""
        return self.product.price * self.quantity


class CartSummary(BaseModel):
    """Cart lines with their quantity and amount totals"""

    items: List[CartItem]
    total_quantity: int
    total_amount: Decimal

    @classmethod
    def from_items(cls, items: List[CartItem]) -> "CartSummary":
        return cls(
            items=items,
            total_quantity=sum(item.quantity for item in items),
            total_amount=sum((item.subtotal for item in items), Decimal("0"))
        )


class AddToCartRequest(BaseModel):
    """Schema for adding a product to the cart"""
    product_id: str
    quantity: int = 1


class UpdateQuantityRequest(BaseModel):
    """Schema for changing a cart line's quantity"""
    quantity: int
