"""
Cart Repository - Data Access Layer for cart_items

Every query is scoped to the owning identity (clerk_id). Reads join the
current product row so callers get a CartItem with its Product.
"""
from typing import List, Optional

from storefront.core.database import Database
from storefront.domain.cart import CartItem
from storefront.domain.product import Product

CART_ITEM_COLUMNS = """
    ci.id, ci.clerk_id, ci.product_id, ci.quantity,
    ci.created_at, ci.updated_at,
    p.name AS product_name,
    p.description AS product_description,
    p.price AS product_price,
    p.category AS product_category,
    p.stock_quantity AS product_stock_quantity,
    p.is_active AS product_is_active,
    p.image_url AS product_image_url,
    p.created_at AS product_created_at,
    p.updated_at AS product_updated_at
"""


class CartRepository:
    """Repository for cart_items data access"""

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _map_row_to_cart_item(row: dict) -> CartItem:
        product = Product(
            id=str(row['product_id']),
            name=row['product_name'],
            description=row['product_description'],
            price=row['product_price'],
            category=row['product_category'],
            stock_quantity=row['product_stock_quantity'],
            is_active=row['product_is_active'],
            image_url=row['product_image_url'],
            created_at=row['product_created_at'],
            updated_at=row.get('product_updated_at')
        )
        return CartItem(
            id=str(row['id']),
            clerk_id=row['clerk_id'],
            product_id=str(row['product_id']),
            quantity=row['quantity'],
            created_at=row['created_at'],
            updated_at=row.get('updated_at'),
            product=product
        )

    def find_by_owner(self, clerk_id: str) -> List[CartItem]:
        """
        All cart lines of a user with their products, newest first

        Args:
            clerk_id: Owning identity

        Returns:
            List of CartItem (empty when the cart is empty)
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CART_ITEM_COLUMNS}
                FROM cart_items ci
                JOIN products p ON p.id = ci.product_id
                WHERE ci.clerk_id = %s
                ORDER BY ci.created_at DESC
            """, (clerk_id,))

            rows = cursor.fetchall()
            return [self._map_row_to_cart_item(row) for row in rows]

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, cart_item_id: str, clerk_id: str) -> Optional[CartItem]:
        """Find one cart line, only if it belongs to clerk_id"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CART_ITEM_COLUMNS}
                FROM cart_items ci
                JOIN products p ON p.id = ci.product_id
                WHERE ci.id = %s AND ci.clerk_id = %s
            """, (cart_item_id, clerk_id))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_cart_item(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_product(self, clerk_id: str, product_id: str) -> Optional[CartItem]:
        """Find the user's line for a product (the merge key)"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {CART_ITEM_COLUMNS}
                FROM cart_items ci
                JOIN products p ON p.id = ci.product_id
                WHERE ci.clerk_id = %s AND ci.product_id = %s
            """, (clerk_id, product_id))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_cart_item(row)

        finally:
            cursor.close()
            conn.close()

    def insert(self, clerk_id: str, product_id: str, quantity: int) -> str:
        """
        Insert a new cart line

        Returns:
            The new cart item ID
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO cart_items (clerk_id, product_id, quantity)
                VALUES (%s, %s, %s)
                RETURNING id
            """, (clerk_id, product_id, quantity))

            result = cursor.fetchone()
            conn.commit()
            return str(result['id'])

        finally:
            cursor.close()
            conn.close()

    def update_quantity(self, cart_item_id: str, clerk_id: str, quantity: int) -> int:
        """
        Overwrite a line's quantity

        Returns:
            Number of rows updated (0 when the line isn't the user's)
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE cart_items
                SET quantity = %s, updated_at = NOW()
                WHERE id = %s AND clerk_id = %s
            """, (quantity, cart_item_id, clerk_id))

            updated = cursor.rowcount
            conn.commit()
            return updated

        finally:
            cursor.close()
            conn.close()

    def delete(self, cart_item_id: str, clerk_id: str) -> int:
        """Delete one line scoped to its owner; returns rows deleted"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM cart_items
                WHERE id = %s AND clerk_id = %s
            """, (cart_item_id, clerk_id))

            deleted = cursor.rowcount
            conn.commit()
            return deleted

        finally:
            cursor.close()
            conn.close()

    def delete_all(self, clerk_id: str) -> int:
        """Delete every line of a user's cart; returns rows deleted"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM cart_items
                WHERE clerk_id = %s
            """, (clerk_id,))

            deleted = cursor.rowcount
            conn.commit()
            return deleted

        finally:
            cursor.close()
            conn.close()
