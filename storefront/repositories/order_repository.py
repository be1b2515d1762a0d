"""
Order Repository - Data Access Layer for Orders

Handles all database queries for orders and order_items and returns Order
domain models. Order creation writes the header and all of its items in a
single transaction.
"""
import logging
from decimal import Decimal
from typing import List, Optional

import psycopg2
from psycopg2 import errors
from psycopg2.extras import Json

from storefront.core.database import Database
from storefront.core.errors import DuplicateOrder, OrderItemsWriteFailed, OrderWriteFailed
from storefront.domain.order import Order, OrderItem, OrderStatus, ShippingAddress

logger = logging.getLogger(__name__)

ORDER_COLUMNS = """
    o.id, o.clerk_id, o.total_amount, o.status,
    o.shipping_address, o.order_note, o.idempotency_key,
    o.created_at, o.updated_at
"""


class OrderRepository:
    """
    Repository for Order data access

    All SQL queries for orders are centralized here.
    Reads are always scoped to the owning identity.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _map_row_to_order(row: dict, items: Optional[List[dict]] = None) -> Order:
        return Order(
            id=str(row['id']),
            clerk_id=row['clerk_id'],
            total_amount=row['total_amount'],
            status=row['status'],
            shipping_address=row['shipping_address'],
            order_note=row['order_note'],
            idempotency_key=row.get('idempotency_key'),
            created_at=row['created_at'],
            updated_at=row.get('updated_at'),
            items=[
                OrderItem(
                    id=str(item['id']),
                    order_id=str(item['order_id']),
                    product_id=str(item['product_id']),
                    product_name=item['product_name'],
                    quantity=item['quantity'],
                    price=item['price'],
                    created_at=item['created_at']
                )
                for item in (items or [])
            ]
        )

    def create_with_items(
        self,
        clerk_id: str,
        total_amount: Decimal,
        shipping_address: ShippingAddress,
        items: List[OrderItem],
        order_note: Optional[str] = None,
        idempotency_key: Optional[str] = None
    ) -> str:
        """
        Create an order header and its items atomically

        Steps (one transaction):
        1. Insert the order with status 'pending'
        2. Insert one order_items row per item
        3. Commit

        Args:
            clerk_id: Owning identity
            total_amount: Order total computed by the caller
            shipping_address: Where to ship (stored as JSONB)
            items: Line items with denormalized name and price
            order_note: Optional note from the buyer
            idempotency_key: Optional client dedup key

        Returns:
            The new order ID

        Raises:
            DuplicateOrder: idempotency_key was already used by clerk_id
            OrderWriteFailed: Header insert (or commit) failed, nothing persisted
            OrderItemsWriteFailed: An item insert failed, header rolled back
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            try:
                cursor.execute("""
                    INSERT INTO orders (
                        clerk_id, total_amount, status,
                        shipping_address, order_note, idempotency_key
                    ) VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING id
                """, (
                    clerk_id,
                    total_amount,
                    OrderStatus.PENDING.value,
                    Json(shipping_address.model_dump()),
                    order_note,
                    idempotency_key
                ))
                order_id = str(cursor.fetchone()['id'])
            except errors.UniqueViolation as e:
                conn.rollback()
                if idempotency_key:
                    logger.info(f"Idempotency key {idempotency_key} already used by {clerk_id}")
                    raise DuplicateOrder() from e
                logger.error(f"Order header insert failed for {clerk_id}: {e}")
                raise OrderWriteFailed() from e
            except psycopg2.Error as e:
                conn.rollback()
                logger.error(f"Order header insert failed for {clerk_id}: {e}")
                raise OrderWriteFailed() from e

            try:
                for item in items:
                    cursor.execute("""
                        INSERT INTO order_items (
                            order_id, product_id, product_name, quantity, price
                        ) VALUES (%s, %s, %s, %s, %s)
                    """, (
                        order_id,
                        item.product_id,
                        item.product_name,
                        item.quantity,
                        item.price
                    ))
            except psycopg2.Error as e:
                conn.rollback()
                logger.error(f"Order items insert failed for order {order_id}, rolled back: {e}")
                raise OrderItemsWriteFailed() from e

            try:
                conn.commit()
            except psycopg2.Error as e:
                conn.rollback()
                logger.error(f"Order commit failed for {clerk_id}: {e}")
                raise OrderWriteFailed() from e

            return order_id

        finally:
            cursor.close()
            conn.close()

    def find_by_idempotency_key(self, clerk_id: str, idempotency_key: str) -> Optional[Order]:
        """Find an order previously created with the same client key"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                WHERE o.clerk_id = %s AND o.idempotency_key = %s
            """, (clerk_id, idempotency_key))

            row = cursor.fetchone()
            if not row:
                return None

            return self._map_row_to_order(row)

        finally:
            cursor.close()
            conn.close()

    def find_by_id(self, order_id: str, clerk_id: str) -> Optional[Order]:
        """
        Find order by ID with its items

        Args:
            order_id: Order ID
            clerk_id: Owning identity; other users' orders are not returned

        Returns:
            Order with items or None if not found
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                WHERE o.id = %s AND o.clerk_id = %s
            """, (order_id, clerk_id))

            row = cursor.fetchone()
            if not row:
                return None

            cursor.execute("""
                SELECT id, order_id, product_id, product_name, quantity, price, created_at
                FROM order_items
                WHERE order_id = %s
                ORDER BY created_at, id
            """, (order_id,))

            items = cursor.fetchall()
            return self._map_row_to_order(row, items)

        finally:
            cursor.close()
            conn.close()

    def find_by_owner(self, clerk_id: str, limit: int = 50, offset: int = 0) -> List[Order]:
        """
        Order history of a user, newest first (headers only)

        Args:
            clerk_id: Owning identity
            limit: Maximum results to return
            offset: Number of results to skip
        """
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {ORDER_COLUMNS}
                FROM orders o
                WHERE o.clerk_id = %s
                ORDER BY o.created_at DESC
                LIMIT %s OFFSET %s
            """, (clerk_id, limit, offset))

            rows = cursor.fetchall()
            return [self._map_row_to_order(row) for row in rows]

        finally:
            cursor.close()
            conn.close()

    def update_status(self, order_id: str, clerk_id: str, status: OrderStatus) -> int:
        """Set an order's status; returns rows updated"""
        conn = self.db.connect()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE orders
                SET status = %s, updated_at = NOW()
                WHERE id = %s AND clerk_id = %s
            """, (status.value, order_id, clerk_id))

            updated = cursor.rowcount
            conn.commit()
            return updated

        finally:
            cursor.close()
            conn.close()
