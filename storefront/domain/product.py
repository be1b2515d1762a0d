"""
Product Domain Model

Represents a product entity in the storefront catalog.
Products are maintained outside this service; here they are read-only.
"""
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductCategory(str, Enum):
    """Product categories"""
    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    BOOKS = "books"
    FOOD = "food"
    SPORTS = "sports"
    BEAUTY = "beauty"
    HOME = "home"
    ACCESSORIES = "accessories"
    TOYS = "toys"
    AUTOMOTIVE = "automotive"


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Product UUID (primary key)
        name: Product name
        description: Product description (optional)
        price: Unit sale price
        category: Product category
        stock_quantity: Units currently in stock
        is_active: Whether the product is on sale
        image_url: Public image URL (optional)
        created_at: When product was created
        updated_at: When product was last updated
    """

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., description="Unit sale price", ge=0)
    category: ProductCategory = Field(..., description="Product category")
    stock_quantity: int = Field(0, description="Units in stock", ge=0)
    is_active: bool = Field(True, description="Whether product is on sale")
    image_url: Optional[str] = Field(None, description="Product image URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    model_config = ConfigDict(from_attributes=True)

    def can_fulfill(self, quantity: int) -> bool:
        """Check if current stock covers the requested quantity"""
        return quantity <= self.stock_quantity
