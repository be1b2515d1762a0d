"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.
"""
from storefront.domain.product import Product, ProductCategory
from storefront.domain.cart import CartItem, CartSummary
from storefront.domain.order import Order, OrderItem, OrderStatus, ShippingAddress, CreateOrderInput
from storefront.domain.results import ActionResult, CreateOrderResult

__all__ = [
    'Product',
    'ProductCategory',
    'CartItem',
    'CartSummary',
    'Order',
    'OrderItem',
    'OrderStatus',
    'ShippingAddress',
    'CreateOrderInput',
    'ActionResult',
    'CreateOrderResult'
]
