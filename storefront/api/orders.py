"""
Orders API Endpoints
Checkout, order history and cancellation for the signed-in user
"""
from typing import Optional

import psycopg2
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_order_service
from storefront.api.responses import action_response
from storefront.core.auth import Identity, get_current_identity
from storefront.core.errors import StoreError
from storefront.domain.order import CreateOrderInput
from storefront.services.boundary import BOUNDARY_ERRORS
from storefront.services.order_service import OrderService

router = APIRouter()


@router.post("/")
def create_order(
    order_input: CreateOrderInput,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """
    Create an order from the current cart

    The cart is left as is; clear it with DELETE /api/v1/cart once the order
    is confirmed.
    """
    return action_response(service.create_order(identity, order_input), success_status=201)


@router.get("/")
def get_orders(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    identity: Optional[Identity] = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """Order history, newest first"""
    try:
        orders = service.list_orders(identity, limit=limit, offset=offset)
    except BOUNDARY_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Error fetching orders: {str(e)}")

    return {
        "status": "success",
        "limit": limit,
        "offset": offset,
        "count": len(orders),
        "data": orders
    }


@router.get("/{order_id}")
def get_order(
    order_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """Order detail with items"""
    try:
        order = service.get_order(identity, order_id)
    except StoreError as e:
        raise HTTPException(status_code=e.http_status, detail=e.message)
    except psycopg2.DataError:
        raise HTTPException(status_code=404, detail="Order not found.")
    except BOUNDARY_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Error fetching order: {str(e)}")

    return {
        "status": "success",
        "item_count": order.item_count,
        "data": order
    }


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    identity: Optional[Identity] = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    return action_response(service.cancel_order(identity, order_id))
