"""
FastAPI dependencies wiring repositories and services together

Each request builds its services from the configured Database / Supabase
client; tests replace these with app.dependency_overrides.
"""
from fastapi import Depends
from supabase import Client

from storefront.core.config import Settings, get_settings
from storefront.core.database import Database, get_database, get_supabase
from storefront.repositories import CartRepository, OrderRepository, ProductRepository, UserRepository
from storefront.services.cart_service import CartService
from storefront.services.catalog_service import CatalogService
from storefront.services.order_service import OrderService
from storefront.services.user_service import UserService


def get_catalog_service(
    db: Database = Depends(get_database),
    settings: Settings = Depends(get_settings)
) -> CatalogService:
    return CatalogService(ProductRepository(db), per_page=settings.PER_PAGE)


def get_cart_service(db: Database = Depends(get_database)) -> CartService:
    return CartService(CartRepository(db), ProductRepository(db))


def get_order_service(db: Database = Depends(get_database)) -> OrderService:
    return OrderService(CartRepository(db), OrderRepository(db))


def get_user_service(client: Client = Depends(get_supabase)) -> UserService:
    return UserService(UserRepository(client))
