"""
Catalog query parameters and pagination

Parsing of the listing query string (categories, sort, search, page) and the
pagination metadata shared by every paginated endpoint.
"""
import math
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from storefront.domain.product import ProductCategory

T = TypeVar("T")

PER_PAGE = 12

# Categories offered in the listing filter
FILTER_CATEGORIES = [
    ProductCategory.ELECTRONICS,
    ProductCategory.CLOTHING,
    ProductCategory.BOOKS,
    ProductCategory.FOOD,
    ProductCategory.SPORTS,
    ProductCategory.BEAUTY,
    ProductCategory.HOME,
]


class SortOption(str, Enum):
    """Listing sort orders; DEFAULT is newest first"""
    DEFAULT = ""
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    POPULAR = "popular"
    NAME_ASC = "name_asc"


class PaginationMeta(BaseModel):
    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class PaginatedResult(BaseModel, Generic[T]):
    data: List[T]
    meta: PaginationMeta


def parse_categories_param(value: Optional[str]) -> List[ProductCategory]:
    """
    Parse a comma-separated categories parameter

    Unknown values are dropped and duplicates removed, keeping first-seen order.

    Example:
        parse_categories_param("books, food,books,weapons")
        → [ProductCategory.BOOKS, ProductCategory.FOOD]
    """
    if not value:
        return []

    allowed = {category.value: category for category in FILTER_CATEGORIES}
    selected = []
    for raw in value.split(","):
        category = allowed.get(raw.strip())
        if category and category not in selected:
            selected.append(category)
    return selected


def parse_sort_param(value: Optional[str]) -> SortOption:
    """Parse the sort parameter, falling back to DEFAULT for unknown values"""
    if not value:
        return SortOption.DEFAULT
    try:
        return SortOption(value.strip())
    except ValueError:
        return SortOption.DEFAULT


def parse_page_param(value: Optional[str]) -> int:
    """Parse the page parameter; anything that isn't a positive integer is page 1"""
    if not value:
        return 1
    try:
        page = int(value.strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def parse_search_param(value: Optional[str]) -> str:
    """Trimmed search term, empty string when absent"""
    if not value:
        return ""
    return value.strip()


def create_pagination_meta(current_page: int, total_items: int, per_page: int = PER_PAGE) -> PaginationMeta:
    """
    Build pagination metadata

    There is always at least one page, and the current page is clamped into
    [1, total_pages].
    """
    total_pages = max(1, math.ceil(total_items / per_page))
    safe_page = max(1, min(current_page, total_pages))

    return PaginationMeta(
        current_page=safe_page,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
        has_next_page=safe_page < total_pages,
        has_prev_page=safe_page > 1
    )
