"""
Products API Endpoints
Catalog listing, popular products and product detail
"""
from typing import Optional

import psycopg2
from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.api.deps import get_catalog_service
from storefront.core.config import Settings, get_settings
from storefront.domain.catalog import (
    parse_categories_param,
    parse_page_param,
    parse_search_param,
    parse_sort_param,
)
from storefront.services.boundary import BOUNDARY_ERRORS
from storefront.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/")
def get_products(
    categories: Optional[str] = Query(None, description="Comma-separated categories (electronics,books,...)"),
    search: Optional[str] = Query(None, description="Search by name or description"),
    sort: Optional[str] = Query(None, description="price_asc, price_desc, popular or name_asc"),
    page: Optional[str] = Query(None, description="Page number (1-based)"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Get active products with optional filters

    Invalid parameter values fall back to their defaults instead of failing.
    """
    try:
        result = service.list_products(
            categories=parse_categories_param(categories),
            search=parse_search_param(search),
            sort=parse_sort_param(sort),
            page=parse_page_param(page)
        )

        return {
            "status": "success",
            "data": result.data,
            "meta": result.meta
        }

    except BOUNDARY_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Error fetching products: {str(e)}")


@router.get("/popular")
def get_popular_products(
    limit: Optional[int] = Query(None, ge=1, le=50),
    service: CatalogService = Depends(get_catalog_service),
    settings: Settings = Depends(get_settings)
):
    """Best-selling active products"""
    try:
        products = service.popular_products(limit or settings.POPULAR_PRODUCTS_LIMIT)

        return {
            "status": "success",
            "count": len(products),
            "data": products
        }

    except BOUNDARY_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Error fetching popular products: {str(e)}")


@router.get("/{product_id}")
def get_product(product_id: str, service: CatalogService = Depends(get_catalog_service)):
    """Product detail (404 for unknown or discontinued products)"""
    try:
        product = service.get_product(product_id)
    except psycopg2.DataError:
        product = None
    except BOUNDARY_ERRORS as e:
        raise HTTPException(status_code=503, detail=f"Error fetching product: {str(e)}")

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return {
        "status": "success",
        "data": product
    }
