"""
Cart Service
Per-user cart: add with merge, list, quantity update, removal and clear

Every operation returns an ActionResult; failures never escape as exceptions.
"""
import logging
from typing import List, Optional

import psycopg2

from storefront.core.auth import Identity
from storefront.core.errors import (
    CartWriteFailed,
    Inactive,
    InsufficientStock,
    InvalidQuantity,
    NotFound,
)
from storefront.domain.cart import CartItem, CartSummary
from storefront.domain.results import ActionResult
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.boundary import BOUNDARY_ERRORS, require_identity, to_store_error

logger = logging.getLogger(__name__)


class CartService:
    """
    Service for cart operations

    Handles:
    - Stock and active-flag checks before any write
    - Merging repeated adds of the same product into one line
    - Ownership scoping of every line by the caller's identity
    """

    def __init__(self, cart_repository: CartRepository, product_repository: ProductRepository):
        self.cart_repository = cart_repository
        self.product_repository = product_repository

    def add_item(self, identity: Optional[Identity], product_id: str, quantity: int = 1) -> ActionResult:
        """
        Add a product to the cart, merging with an existing line

        Args:
            identity: Current caller (None when signed out)
            product_id: Product to add
            quantity: Units to add (default 1)

        Returns:
            ActionResult
        """
        try:
            clerk_id = require_identity(identity)

            if quantity < 1:
                raise InvalidQuantity()

            product = self.product_repository.find_by_id(product_id)
            if not product:
                raise NotFound("Product not found.")

            if not product.is_active:
                raise Inactive()

            if not product.can_fulfill(quantity):
                raise InsufficientStock(
                    f"Not enough stock (in stock: {product.stock_quantity})."
                )

            existing = self.cart_repository.find_by_product(clerk_id, product_id)

            if existing:
                new_quantity = existing.quantity + quantity
                if not product.can_fulfill(new_quantity):
                    raise InsufficientStock(
                        f"Not enough stock (in stock: {product.stock_quantity}, "
                        f"in cart: {existing.quantity})."
                    )
                self._write(
                    lambda: self.cart_repository.update_quantity(existing.id, clerk_id, new_quantity),
                    "Failed to update the cart quantity."
                )
            else:
                self._write(
                    lambda: self.cart_repository.insert(clerk_id, product_id, quantity),
                    "Failed to add to the cart."
                )

            return ActionResult.ok("Added to cart.")

        except BOUNDARY_ERRORS as e:
            return self._failure("add_item", e)

    def list_items(self, identity: Optional[Identity]) -> List[CartItem]:
        """
        Cart lines with their current products, newest first

        Signed-out callers and read failures get an empty list.
        """
        if identity is None:
            return []

        try:
            return self.cart_repository.find_by_owner(identity.id)
        except BOUNDARY_ERRORS as e:
            logger.error(f"Cart read failed for {identity.id}: {e}")
            return []

    def summarize(self, identity: Optional[Identity]) -> CartSummary:
        """Cart lines plus total quantity and total amount"""
        return CartSummary.from_items(self.list_items(identity))

    def update_quantity(self, identity: Optional[Identity], cart_item_id: str, quantity: int) -> ActionResult:
        """
        Overwrite the quantity of one of the caller's cart lines

        Args:
            identity: Current caller
            cart_item_id: Cart line to change
            quantity: New quantity (>= 1)
        """
        try:
            clerk_id = require_identity(identity)

            if quantity < 1:
                raise InvalidQuantity()

            cart_item = self.cart_repository.find_by_id(cart_item_id, clerk_id)
            if not cart_item:
                raise NotFound("Cart item not found.")

            if not cart_item.product.can_fulfill(quantity):
                raise InsufficientStock(
                    f"Not enough stock (in stock: {cart_item.product.stock_quantity})."
                )

            self._write(
                lambda: self.cart_repository.update_quantity(cart_item_id, clerk_id, quantity),
                "Failed to change the quantity."
            )

            return ActionResult.ok("Quantity updated.")

        except BOUNDARY_ERRORS as e:
            return self._failure("update_quantity", e)

    def remove_item(self, identity: Optional[Identity], cart_item_id: str) -> ActionResult:
        """
        Remove one line from the caller's cart

        A line that doesn't belong to the caller is left untouched and the
        call still reports success.
        """
        try:
            clerk_id = require_identity(identity)

            deleted = self._write(
                lambda: self.cart_repository.delete(cart_item_id, clerk_id),
                "Failed to remove from the cart."
            )
            if not deleted:
                logger.debug(f"remove_item: no line {cart_item_id} for {clerk_id}")

            return ActionResult.ok("Removed from cart.")

        except BOUNDARY_ERRORS as e:
            return self._failure("remove_item", e)

    def clear(self, identity: Optional[Identity]) -> ActionResult:
        """Remove every line from the caller's cart"""
        try:
            clerk_id = require_identity(identity)

            self._write(
                lambda: self.cart_repository.delete_all(clerk_id),
                "Failed to clear the cart."
            )

            return ActionResult.ok("Cart cleared.")

        except BOUNDARY_ERRORS as e:
            return self._failure("clear", e)

    @staticmethod
    def _write(operation, failure_message: str):
        try:
            return operation()
        except (psycopg2.OperationalError, psycopg2.DataError):
            raise
        except psycopg2.Error as e:
            logger.error(f"Cart write failed: {e}")
            raise CartWriteFailed(failure_message) from e

    @staticmethod
    def _failure(operation: str, error: Exception) -> ActionResult:
        store_error = to_store_error(error)
        if store_error.http_status >= 500:
            logger.error(f"{operation} failed: {error}")
        else:
            logger.info(f"{operation} rejected: {store_error.code}")
        return ActionResult.from_error(store_error)
