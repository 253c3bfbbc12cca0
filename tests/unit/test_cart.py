"""Unit tests for the client-side cart."""

from decimal import Decimal

import pytest

from kitchen_order_service.client.cart import Cart
from kitchen_order_service.models.menu_models import MenuItem, OrderLine


@pytest.fixture
def pork() -> MenuItem:
    return MenuItem(id=1, name="Braised Pork", price=Decimal("12.50"), stock=3)


@pytest.fixture
def rice() -> MenuItem:
    return MenuItem(id=2, name="Fried Rice", price=Decimal("8.00"), stock=10)


@pytest.mark.unit
class TestCart:
    """Test suite for Cart."""

    def test_new_cart_is_empty(self) -> None:
        """Test a fresh cart has no entries and a zero total."""
        cart = Cart()

        assert cart.is_empty
        assert len(cart) == 0
        assert cart.total == Decimal("0")
        assert cart.count == 0

    def test_add_increments_existing_entry(self, pork: MenuItem, rice: MenuItem) -> None:
        """Test adding the same dish twice raises its quantity."""
        cart = Cart()

        cart.add(pork)
        cart.add(rice)
        entry = cart.add(pork)

        assert entry.quantity == 2
        assert len(cart) == 2
        assert cart.count == 3
        assert cart.total == Decimal("33.00")
        assert [e.item_id for e in cart.entries] == [1, 2]

    def test_change_quantity_to_zero_removes_entry(self, pork: MenuItem) -> None:
        """Test decrementing below one drops the dish."""
        cart = Cart()
        cart.add(pork)

        cart.change_quantity(1, 2)
        assert cart.entries[0].quantity == 3

        cart.change_quantity(1, -3)
        assert 1 not in cart
        assert cart.is_empty

    def test_change_quantity_unknown_item_is_ignored(self, pork: MenuItem) -> None:
        """Test adjusting a dish that is not in the cart does nothing."""
        cart = Cart()
        cart.add(pork)

        cart.change_quantity(99, 1)

        assert cart.count == 1

    def test_remove_and_clear(self, pork: MenuItem, rice: MenuItem) -> None:
        """Test removing single dishes and clearing the cart."""
        cart = Cart()
        cart.add(pork)
        cart.add(rice)

        cart.remove(1)
        cart.remove(99)
        assert [e.item_id for e in cart.entries] == [2]

        cart.clear()
        assert cart.is_empty

    def test_to_order_lines(self, pork: MenuItem, rice: MenuItem) -> None:
        """Test the cart packages into order lines."""
        cart = Cart()
        cart.add(pork)
        cart.add(pork)
        cart.add(rice)

        lines = cart.to_order_lines()

        assert lines == [OrderLine(id=1, qty=2), OrderLine(id=2, qty=1)]
        assert lines[0].model_dump(by_alias=True) == {"id": 1, "qty": 2}
