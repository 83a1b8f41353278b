"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated


def _make_cart():
    return ShoppingCart.create(owner="user-001")


def _add_headphones(cart, quantity=1):
    cart.add_item("1", "Wireless Headphones", 99.99, quantity=quantity)


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        _add_headphones(cart, quantity=2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].unit_price == 99.99

    def test_add_same_product_merges_quantity(self):
        cart = _make_cart()
        _add_headphones(cart)
        _add_headphones(cart, quantity=2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_add_raises_event(self):
        cart = _make_cart()
        _add_headphones(cart)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(added) == 1
        assert added[0].product_id == "1"
        assert added[0].owner == "user-001"

    def test_zero_quantity_rejected(self):
        cart = _make_cart()
        with pytest.raises(ValidationError):
            _add_headphones(cart, quantity=0)


class TestTotals:
    def test_item_count_and_subtotal(self):
        cart = _make_cart()
        _add_headphones(cart, quantity=2)
        cart.add_item("4", "Coffee Mug", 24.99, quantity=1)
        assert cart.item_count() == 3
        assert cart.subtotal() == 224.97

    def test_empty_cart_totals(self):
        cart = _make_cart()
        assert cart.item_count() == 0
        assert cart.subtotal() == 0


class TestUpdateQuantity:
    def test_update_quantity(self):
        cart = _make_cart()
        _add_headphones(cart)
        cart.update_item_quantity("1", 5)
        assert cart.items[0].quantity == 5
        updated = [e for e in cart._events if isinstance(e, CartQuantityUpdated)]
        assert updated[0].previous_quantity == 1
        assert updated[0].new_quantity == 5

    def test_non_positive_quantity_rejected(self):
        cart = _make_cart()
        _add_headphones(cart)
        with pytest.raises(ValidationError):
            cart.update_item_quantity("1", 0)

    def test_unknown_product_is_ignored(self):
        cart = _make_cart()
        _add_headphones(cart)
        cart.update_item_quantity("99", 4)
        assert cart.items[0].quantity == 1


class TestRemoveAndClear:
    def test_remove_item(self):
        cart = _make_cart()
        _add_headphones(cart)
        cart.remove_item("1")
        assert len(cart.items) == 0
        assert any(isinstance(e, CartItemRemoved) for e in cart._events)

    def test_clear_empties_cart(self):
        cart = _make_cart()
        _add_headphones(cart)
        cart.add_item("4", "Coffee Mug", 24.99)
        assert cart.clear() is True
        assert len(cart.items) == 0
        cleared = [e for e in cart._events if isinstance(e, CartCleared)]
        assert cleared[0].items_removed == 2

    def test_clear_empty_cart_is_noop(self):
        cart = _make_cart()
        assert cart.clear() is False
        assert not any(isinstance(e, CartCleared) for e in cart._events)
