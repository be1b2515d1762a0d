"""
Cart API Endpoints
The signed-in user's cart
"""
from typing import Optional

from fastapi import APIRouter, Depends

from storefront.api.deps import get_cart_service
from storefront.api.responses import action_response
from storefront.core.auth import Identity, get_current_identity
from storefront.domain.cart import AddToCartRequest, UpdateQuantityRequest
from storefront.services.cart_service import CartService

router = APIRouter()


@router.get("/")
def get_cart(
    identity: Optional[Identity] = Depends(get_current_identity),
    service: CartService = Depends(get_cart_service)
):
    """
    Cart lines with products and totals

    Signed-out callers get an empty cart rather than an error.
    """
    summary = service.summarize(identity)

    return {
        "status": "success",
        "count": len(summary.items),
        "data": summary
    }


@router.post("/items")
def add_to_cart(
    request: AddToCartRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: CartService = Depends(get_cart_service)
):
    return action_response(service.add_item(identity, request.product_id, request.quantity))


@router.patch("/items/{cart_item_id}")
def update_cart_item_quantity(
    cart_item_id: str,
    request: UpdateQuantityRequest,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: CartService = Depends(get_cart_service)
):
    return action_response(service.update_quantity(identity, cart_item_id, request.quantity))


@router.delete("/items/{cart_item_id}")
def remove_cart_item(
    cart_item_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: CartService = Depends(get_cart_service)
):
    return action_response(service.remove_item(identity, cart_item_id))


@router.delete("/")
def clear_cart(
    identity: Optional[Identity] = Depends(get_current_identity),
    service: CartService = Depends(get_cart_service)
):
    return action_response(service.clear(identity))
