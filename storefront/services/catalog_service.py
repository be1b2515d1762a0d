"""
Catalog Service
Product listing with category filter, search, sort and pagination
"""
from typing import List, Optional, Sequence

from storefront.domain.catalog import PER_PAGE, PaginatedResult, SortOption, create_pagination_meta
from storefront.domain.product import Product, ProductCategory
from storefront.repositories.product_repository import ProductRepository


class CatalogService:
    """Service for catalog reads"""

    def __init__(self, product_repository: ProductRepository, per_page: int = PER_PAGE):
        self.product_repository = product_repository
        self.per_page = per_page

    def list_products(
        self,
        categories: Optional[Sequence[ProductCategory]] = None,
        search: str = "",
        sort: SortOption = SortOption.DEFAULT,
        page: int = 1
    ) -> PaginatedResult[Product]:
        """
        One page of active products

        A page past the end is clamped to the last page.
        """
        products, total = self._fetch_page(categories, search, sort, page)
        meta = create_pagination_meta(page, total, self.per_page)

        if meta.current_page != page:
            products, total = self._fetch_page(categories, search, sort, meta.current_page)
            meta = create_pagination_meta(meta.current_page, total, self.per_page)

        return PaginatedResult[Product](data=products, meta=meta)

    def get_product(self, product_id: str) -> Optional[Product]:
        """Active product by ID (None when missing or no longer on sale)"""
        product = self.product_repository.find_by_id(product_id)
        if not product or not product.is_active:
            return None
        return product

    def popular_products(self, limit: int = 8) -> List[Product]:
        return self.product_repository.find_popular(limit)

    def _fetch_page(self, categories, search, sort, page):
        return self.product_repository.find_active(
            categories=categories,
            search=search or None,
            sort=sort,
            limit=self.per_page,
            offset=(page - 1) * self.per_page
        )
