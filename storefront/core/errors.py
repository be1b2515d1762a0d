"""
Storefront error taxonomy

Every failure a cart, order or catalog operation can report is a StoreError.
Services catch these at the boundary and turn them into ActionResults, so
none of them reaches an HTTP client as an exception.
"""


class StoreError(Exception):
    """Base class for storefront failures"""

    code = "store_error"
    http_status = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(StoreError):
    code = "unauthenticated"
    http_status = 401
    default_message = "You need to sign in."


class NotFound(StoreError):
    code = "not_found"
    http_status = 404
    default_message = "The requested item was not found."


class Inactive(StoreError):
    code = "product_inactive"
    http_status = 409
    default_message = "This product is no longer on sale."


class InsufficientStock(StoreError):
    code = "insufficient_stock"
    http_status = 409
    default_message = "Not enough stock."


class InvalidQuantity(StoreError):
    code = "invalid_quantity"
    http_status = 422
    default_message = "Quantity must be at least 1."


class EmptyCart(StoreError):
    code = "empty_cart"
    http_status = 409
    default_message = "Your cart is empty."


class CartWriteFailed(StoreError):
    code = "cart_write_failed"
    http_status = 500
    default_message = "Failed to update the cart."


class OrderWriteFailed(StoreError):
    code = "order_write_failed"
    http_status = 500
    default_message = "Failed to create the order."


class OrderItemsWriteFailed(StoreError):
    code = "order_items_write_failed"
    http_status = 500
    default_message = "Failed to save the order items."


class DuplicateOrder(StoreError):
    """The caller already placed an order with this idempotency key"""
    code = "duplicate_order"
    http_status = 409
    default_message = "An order with this idempotency key already exists."


class InvalidRecord(StoreError):
    code = "invalid_record"
    http_status = 500
    default_message = "A stored record could not be read."


class InvalidStatusTransition(StoreError):
    code = "invalid_status_transition"
    http_status = 409
    default_message = "The order cannot change to that status."


class BackendUnavailable(StoreError):
    code = "backend_unavailable"
    http_status = 503
    default_message = "The store is temporarily unavailable. Please try again."


def http_status_for(code: str) -> int:
    """HTTP status matching a StoreError code (500 for unknown codes)"""
    for error_class in _all_error_classes(StoreError):
        if error_class.code == code:
            return error_class.http_status
    return StoreError.http_status


def _all_error_classes(base):
    for subclass in base.__subclasses__():
        yield subclass
        yield from _all_error_classes(subclass)
