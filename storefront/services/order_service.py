"""
Order Service
Converts the caller's cart into an order and serves order history

Checkout steps:
1. Require an identity
2. Return the existing order when the idempotency key was already used
3. Snapshot the cart (lines + products) straight from the repository
4. Validate every line against the snapshot (active, in stock)
5. Compute the total from snapshot prices
6. Write header + items in one transaction

The cart is not cleared here; callers decide when to clear it.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from storefront.core.auth import Identity
from storefront.core.errors import (
    DuplicateOrder,
    EmptyCart,
    Inactive,
    InsufficientStock,
    InvalidStatusTransition,
    NotFound,
)
from storefront.domain.cart import CartItem
from storefront.domain.order import CreateOrderInput, Order, OrderItem, OrderStatus
from storefront.domain.results import ActionResult, CreateOrderResult
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.order_repository import OrderRepository
from storefront.services.boundary import BOUNDARY_ERRORS, require_identity, to_store_error

logger = logging.getLogger(__name__)


def validate_cart_snapshot(cart_items: List[CartItem]) -> None:
    """
    Check every line of a cart snapshot

    Raises:
        EmptyCart: No lines
        Inactive: A product is no longer on sale
        InsufficientStock: A line asks for more than the product's stock
    """
    if not cart_items:
        raise EmptyCart()

    for item in cart_items:
        if not item.product.is_active:
            raise Inactive(f"A product in your cart is no longer on sale: {item.product.name}")
        if not item.product.can_fulfill(item.quantity):
            raise InsufficientStock(
                f"Not enough stock for {item.product.name} "
                f"(in stock: {item.product.stock_quantity}, ordered: {item.quantity})."
            )


def calculate_total(cart_items: List[CartItem]) -> Decimal:
    """Sum of price * quantity over the snapshot"""
    return sum((item.subtotal for item in cart_items), Decimal("0"))


def build_order_items(cart_items: List[CartItem]) -> List[OrderItem]:
    """Order lines with product name and price copied from the snapshot"""
    return [
        OrderItem(
            product_id=item.product_id,
            product_name=item.product.name,
            quantity=item.quantity,
            price=item.product.price
        )
        for item in cart_items
    ]


class OrderService:
    """Service for checkout and order history"""

    def __init__(self, cart_repository: CartRepository, order_repository: OrderRepository):
        self.cart_repository = cart_repository
        self.order_repository = order_repository

    def create_order(self, identity: Optional[Identity], order_input: CreateOrderInput) -> CreateOrderResult:
        """
        Create an order from the caller's current cart

        Args:
            identity: Current caller
            order_input: Shipping address, optional note and idempotency key

        Returns:
            CreateOrderResult with order_id on success
        """
        try:
            clerk_id = require_identity(identity)
            logger.info(f"[create_order] start for {clerk_id}")

            if order_input.idempotency_key:
                existing = self._existing_order(clerk_id, order_input.idempotency_key)
                if existing:
                    return existing

            # Read failures propagate so an outage isn't reported as an empty cart
            cart_items = self.cart_repository.find_by_owner(clerk_id)
            logger.debug(f"[create_order] cart snapshot has {len(cart_items)} lines")

            validate_cart_snapshot(cart_items)

            total_amount = calculate_total(cart_items)
            logger.debug(f"[create_order] total {total_amount}")

            try:
                order_id = self.order_repository.create_with_items(
                    clerk_id=clerk_id,
                    total_amount=total_amount,
                    shipping_address=order_input.shipping_address,
                    items=build_order_items(cart_items),
                    order_note=order_input.order_note,
                    idempotency_key=order_input.idempotency_key
                )
            except DuplicateOrder:
                # A concurrent request with the same key committed first
                logger.info(f"[create_order] key {order_input.idempotency_key} taken concurrently")
                existing = self._existing_order(clerk_id, order_input.idempotency_key)
                if existing:
                    return existing
                raise

            logger.info(f"[create_order] order {order_id} created with {len(cart_items)} items")

            return CreateOrderResult.ok("Order created successfully.", order_id=order_id)

        except BOUNDARY_ERRORS as e:
            store_error = to_store_error(e)
            logger.warning(f"[create_order] failed: {store_error.code} ({e})")
            return CreateOrderResult.from_error(store_error)

    def _existing_order(self, clerk_id: str, idempotency_key: str) -> Optional[CreateOrderResult]:
        existing = self.order_repository.find_by_idempotency_key(clerk_id, idempotency_key)
        if not existing:
            return None
        logger.info(f"[create_order] key already used, returning order {existing.id}")
        return CreateOrderResult.ok("Order already created.", order_id=existing.id)

    def list_orders(self, identity: Optional[Identity], limit: int = 50, offset: int = 0) -> List[Order]:
        """Caller's orders, newest first; empty when signed out"""
        if identity is None:
            return []
        return self.order_repository.find_by_owner(identity.id, limit=limit, offset=offset)

    def get_order(self, identity: Optional[Identity], order_id: str) -> Order:
        """
        One of the caller's orders with its items

        Raises:
            Unauthenticated: No identity
            NotFound: Unknown order or another user's order
        """
        clerk_id = require_identity(identity)
        order = self.order_repository.find_by_id(order_id, clerk_id)
        if not order:
            raise NotFound("Order not found.")
        return order

    def cancel_order(self, identity: Optional[Identity], order_id: str) -> ActionResult:
        """Cancel one of the caller's orders if its status allows it"""
        try:
            order = self.get_order(identity, order_id)

            if not order.status.can_transition_to(OrderStatus.CANCELLED):
                raise InvalidStatusTransition(
                    f"An order that is {order.status.value} cannot be cancelled."
                )

            self.order_repository.update_status(order.id, order.clerk_id, OrderStatus.CANCELLED)
            logger.info(f"Order {order.id} cancelled by {order.clerk_id}")

            return ActionResult.ok("Order cancelled.")

        except BOUNDARY_ERRORS as e:
            store_error = to_store_error(e)
            logger.warning(f"cancel_order failed: {store_error.code} ({e})")
            return ActionResult.from_error(store_error)
