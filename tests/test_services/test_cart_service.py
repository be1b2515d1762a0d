"""
Unit tests for CartService

Repositories are mocked; these tests cover the checks and the merge logic.
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import Mock

import psycopg2
import pytest

from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.cart_service import CartService


@pytest.fixture
def cart_repository():
    return Mock()


@pytest.fixture
def product_repository(make_product):
    repo = Mock()
    repo.find_by_id.return_value = make_product(stock_quantity=5)
    return repo


@pytest.fixture
def service(cart_repository, product_repository):
    return CartService(cart_repository, product_repository)


class TestAddItem:

    def test_add_new_line(self, service, cart_repository, identity):
        cart_repository.find_by_product.return_value = None

        result = service.add_item(identity, 'prod-1', 2)

        assert result.success is True
        assert result.message == 'Added to cart.'
        cart_repository.insert.assert_called_once_with('user_buyer', 'prod-1', 2)
        cart_repository.update_quantity.assert_not_called()

    def test_repeated_adds_merge_until_stock_runs_out(self, service, cart_repository, identity, make_cart_item):
        """Stock 5: add 2, add 2 (merged to 4), add 2 rejected"""
        cart_repository.find_by_product.side_effect = [
            None,
            make_cart_item(id='cart-1', quantity=2),
            make_cart_item(id='cart-1', quantity=4),
        ]

        first = service.add_item(identity, 'prod-1', 2)
        second = service.add_item(identity, 'prod-1', 2)
        third = service.add_item(identity, 'prod-1', 2)

        assert first.success is True
        assert second.success is True
        cart_repository.insert.assert_called_once_with('user_buyer', 'prod-1', 2)
        cart_repository.update_quantity.assert_called_once_with('cart-1', 'user_buyer', 4)

        assert third.success is False
        assert third.code == 'insufficient_stock'
        assert 'in stock: 5' in third.message
        assert 'in cart: 4' in third.message

    def test_quantity_above_stock_rejected(self, service, cart_repository, identity):
        result = service.add_item(identity, 'prod-1', 6)

        assert result.success is False
        assert result.code == 'insufficient_stock'
        cart_repository.find_by_product.assert_not_called()
        cart_repository.insert.assert_not_called()

    def test_inactive_product_rejected(self, service, product_repository, cart_repository, identity, make_product):
        product_repository.find_by_id.return_value = make_product(is_active=False)

        result = service.add_item(identity, 'prod-1', 1)

        assert result.success is False
        assert result.code == 'product_inactive'
        cart_repository.insert.assert_not_called()

    def test_unknown_product(self, service, product_repository, identity):
        product_repository.find_by_id.return_value = None

        result = service.add_item(identity, 'missing', 1)

        assert result.success is False
        assert result.code == 'not_found'
        assert result.message == 'Product not found.'

    def test_zero_quantity_rejected(self, service, product_repository, identity):
        result = service.add_item(identity, 'prod-1', 0)

        assert result.code == 'invalid_quantity'
        product_repository.find_by_id.assert_not_called()

    def test_unauthenticated(self, service, product_repository, cart_repository):
        result = service.add_item(None, 'prod-1', 1)

        assert result.success is False
        assert result.code == 'unauthenticated'
        product_repository.find_by_id.assert_not_called()
        cart_repository.insert.assert_not_called()

    def test_insert_failure_reports_cart_write_failed(self, service, cart_repository, identity):
        cart_repository.find_by_product.return_value = None
        cart_repository.insert.side_effect = psycopg2.IntegrityError("duplicate key")

        result = service.add_item(identity, 'prod-1', 1)

        assert result.success is False
        assert result.code == 'cart_write_failed'
        assert result.message == 'Failed to add to the cart.'

    def test_backend_down(self, service, product_repository, identity):
        product_repository.find_by_id.side_effect = psycopg2.OperationalError("could not connect")

        result = service.add_item(identity, 'prod-1', 1)

        assert result.code == 'backend_unavailable'


class TestListItems:

    def test_returns_owner_lines(self, service, cart_repository, identity, make_cart_item):
        cart_repository.find_by_owner.return_value = [make_cart_item()]

        items = service.list_items(identity)

        assert len(items) == 1
        cart_repository.find_by_owner.assert_called_once_with('user_buyer')

    def test_unauthenticated_gets_empty_list(self, service, cart_repository):
        assert service.list_items(None) == []
        cart_repository.find_by_owner.assert_not_called()

    def test_read_failure_gets_empty_list(self, service, cart_repository, identity):
        cart_repository.find_by_owner.side_effect = psycopg2.OperationalError("timeout")

        assert service.list_items(identity) == []

    def test_summarize_totals(self, service, cart_repository, identity, make_cart_item):
        cart_repository.find_by_owner.return_value = [
            make_cart_item(id='cart-1', quantity=2),
            make_cart_item(id='cart-2', quantity=1, product={'id': 'prod-2', 'price': Decimal('18000')}),
        ]

        summary = service.summarize(identity)

        assert summary.total_quantity == 3
        assert summary.total_amount == Decimal('68000')


class TestUpdateQuantity:

    def test_update(self, service, cart_repository, identity, make_cart_item):
        cart_repository.find_by_id.return_value = make_cart_item(quantity=1)

        result = service.update_quantity(identity, 'cart-1', 3)

        assert result.success is True
        assert result.message == 'Quantity updated.'
        cart_repository.update_quantity.assert_called_once_with('cart-1', 'user_buyer', 3)

    def test_zero_writes_nothing(self, service, cart_repository, identity):
        result = service.update_quantity(identity, 'cart-1', 0)

        assert result.success is False
        assert result.code == 'invalid_quantity'
        cart_repository.find_by_id.assert_not_called()
        cart_repository.update_quantity.assert_not_called()

    def test_above_stock(self, service, cart_repository, identity, make_cart_item):
        cart_repository.find_by_id.return_value = make_cart_item(quantity=1)

        result = service.update_quantity(identity, 'cart-1', 9)

        assert result.code == 'insufficient_stock'
        cart_repository.update_quantity.assert_not_called()

    def test_other_users_line_not_found(self, service, cart_repository, other_identity):
        cart_repository.find_by_id.return_value = None

        result = service.update_quantity(other_identity, 'cart-1', 2)

        assert result.code == 'not_found'
        assert result.message == 'Cart item not found.'
        cart_repository.find_by_id.assert_called_once_with('cart-1', 'user_other')


class TestRemoveAndClear:

    def test_remove(self, service, cart_repository, identity):
        cart_repository.delete.return_value = 1

        result = service.remove_item(identity, 'cart-1')

        assert result.success is True
        cart_repository.delete.assert_called_once_with('cart-1', 'user_buyer')

    def test_remove_other_users_line_reports_success(self, service, cart_repository, other_identity):
        """Nothing is deleted, the caller still gets success"""
        cart_repository.delete.return_value = 0

        result = service.remove_item(other_identity, 'cart-1')

        assert result.success is True
        assert result.message == 'Removed from cart.'
        cart_repository.delete.assert_called_once_with('cart-1', 'user_other')

    def test_clear(self, service, cart_repository, identity):
        cart_repository.delete_all.return_value = 3

        result = service.clear(identity)

        assert result.success is True
        assert result.message == 'Cart cleared.'
        cart_repository.delete_all.assert_called_once_with('user_buyer')

    def test_clear_unauthenticated(self, service, cart_repository):
        result = service.clear(None)

        assert result.code == 'unauthenticated'
        cart_repository.delete_all.assert_not_called()


class TestUnreadableProductRows:
    """Product rows whose category isn't a known ProductCategory"""

    @pytest.fixture
    def garden_product_row(self):
        return {
            'id': 'prod-9',
            'name': 'Rake',
            'description': None,
            'price': Decimal('12000'),
            'category': 'garden',
            'stock_quantity': 4,
            'is_active': True,
            'image_url': None,
            'created_at': datetime(2025, 11, 1, 8, 0, 0),
            'updated_at': None,
        }

    def test_list_items_degrades_to_empty(self, mock_db, identity, garden_product_row):
        db, conn, cursor = mock_db
        cursor.fetchall.return_value = [{
            'id': 'cart-9',
            'clerk_id': 'user_buyer',
            'product_id': 'prod-9',
            'quantity': 1,
            'created_at': datetime(2025, 11, 4, 9, 30, 0),
            'updated_at': None,
            **{f'product_{key}': value for key, value in garden_product_row.items() if key != 'id'},
        }]

        service = CartService(CartRepository(db), ProductRepository(db))

        assert service.list_items(identity) == []
        conn.close.assert_called_once()

    def test_add_item_reports_result(self, mock_db, identity, garden_product_row):
        db, conn, cursor = mock_db
        cursor.fetchone.return_value = garden_product_row

        service = CartService(CartRepository(db), ProductRepository(db))
        result = service.add_item(identity, 'prod-9', 1)

        assert result.success is False
        assert result.code == 'invalid_record'
        # Only the product lookup ran; nothing was written
        cursor.execute.assert_called_once()
        conn.commit.assert_not_called()
