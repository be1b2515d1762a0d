"""
Product Repository - Data Access Layer for Products

Read-only catalog queries. Returns Product domain models.
"""
from typing import List, Optional, Sequence, Tuple

from storefront.core.database import Database
from storefront.domain.catalog import SortOption
from storefront.domain.product import Product, ProductCategory

PRODUCT_COLUMNS = """
    p.id, p.name, p.description, p.price, p.category,
    p.stock_quantity, p.is_active, p.image_url,
    p.created_at, p.updated_at
"""

# Units sold per product, used by the "popular" ranking
SALES_JOIN = """
    LEFT JOIN (
        SELECT product_id, SUM(quantity) AS total_sold
        FROM order_items
        GROUP BY product_id
    ) s ON s.product_id = p.id
"""

ORDER_BY = {
    SortOption.DEFAULT: "p.created_at DESC",
    SortOption.PRICE_ASC: "p.price ASC, p.created_at DESC",
    SortOption.PRICE_DESC: "p.price DESC, p.created_at DESC",
    SortOption.NAME_ASC: "p.name ASC, p.created_at DESC",
    SortOption.POPULAR: "COALESCE(s.total_sold, 0) DESC, p.created_at DESC",
}


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so a search term matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ProductRepository:
    """
    Repository for Product data access

    All SQL queries for products are centralized here.
    Returns Product domain models, not raw dictionaries.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _map_row_to_product(row: dict) -> Product:
        return Product(
            id=str(row['id']),
            name=row['name'],
            description=row['description'],
            price=row['price'],
            category=row['category'],
            stock_quantity=row['stock_quantity'],
            is_active=row['is_active'],
            image_url=row['image_url'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at')
        )

    @staticmethod
    def _build_filters(
        categories: Optional[Sequence[ProductCategory]],
        search: Optional[str]
    ) -> Tuple[str, list]:
        conditions = ["p.is_active = true"]
        params = []

        if categories:
            conditions.append("p.category = ANY(%s)")
            params.append([category.value for category in categories])

        if search:
            conditions.append("(p.name ILIKE %s OR p.description ILIKE %s)")
            search_term = f"%{escape_like(search)}%"
            params.extend([search_term, search_term])

        return " AND ".join(conditions), params

    def find_by_id(self, product_id: str) -> Optional[Product]:
        """
        Find product by ID, active or not

        Args:
            product_id: Product ID

        Returns:
            Product or None if not found
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                WHERE p.id = %s
            """, (product_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_product(row)

        finally:
            cursor.close()
            conn.close()

    def find_active(
        self,
        categories: Optional[Sequence[ProductCategory]] = None,
        search: Optional[str] = None,
        sort: SortOption = SortOption.DEFAULT,
        limit: int = 12,
        offset: int = 0
    ) -> Tuple[List[Product], int]:
        """
        Find active products with filters

        Args:
            categories: Only products in these categories (all when empty)
            search: Case-insensitive match on name or description
            sort: Listing order
            limit: Maximum results to return
            offset: Number of results to skip

        Returns:
            Tuple of (list of products, total count)
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            where_clause, params = self._build_filters(categories, search)

            # Get total count
            cursor.execute(f"""
                SELECT COUNT(*) as total
                FROM products p
                WHERE {where_clause}
            """, params)
            total = cursor.fetchone()['total']

            join = SALES_JOIN if sort == SortOption.POPULAR else ""

            # Get products
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                {join}
                WHERE {where_clause}
                ORDER BY {ORDER_BY[sort]}
                LIMIT %s OFFSET %s
            """, params + [limit, offset])

            rows = cursor.fetchall()
            products = [self._map_row_to_product(row) for row in rows]

            return products, total

        finally:
            cursor.close()
            conn.close()

    def find_popular(self, limit: int = 8) -> List[Product]:
        """
        Find the best-selling active products

        Ranked by units ordered across all orders; products never ordered
        follow, newest first.
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {PRODUCT_COLUMNS}
                FROM products p
                {SALES_JOIN}
                WHERE p.is_active = true
                ORDER BY {ORDER_BY[SortOption.POPULAR]}
                LIMIT %s
            """, (limit,))

            rows = cursor.fetchall()
            return [self._map_row_to_product(row) for row in rows]

        finally:
            cursor.close()
            conn.close()
