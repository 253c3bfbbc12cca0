"""Cart controller driving the ordering flow of the customer page.

The controller owns the loaded menu and an explicit ``Cart``; every
operation reports back through a ``CartView`` snapshot instead of mutating
page-level globals.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from kitchen_order_service.client.cart import Cart, CartEntry
from kitchen_order_service.client.kitchen_client import (
    KitchenApiClient,
    KitchenApiError,
    SubmittedOrder,
)
from kitchen_order_service.models.menu_models import MenuItem

logger = logging.getLogger(__name__)


@dataclass
class CartView:
    """What the page renders after each cart operation."""

    entries: list[CartEntry]
    total: Decimal
    count: int
    message: str | None = None
    success: bool = True


@dataclass
class CartController:
    """Menu, cart and order form state of one customer session.

    Attributes:
        client: API client used to load the menu and submit orders
        cart: The customer's cart
        menu: Dishes loaded from the API, keyed by id
        order_form_open: Whether the order form is showing
    """

    client: KitchenApiClient
    cart: Cart = field(default_factory=Cart)
    menu: dict[int, MenuItem] = field(default_factory=dict)
    order_form_open: bool = False

    def view(self, message: str | None = None, success: bool = True) -> CartView:
        return CartView(
            entries=self.cart.entries,
            total=self.cart.total,
            count=self.cart.count,
            message=message,
            success=success,
        )

    async def load_menu(self) -> list[MenuItem]:
        """Fetch the menu and replace the locally known dishes.

        Raises:
            KitchenApiError: If the menu could not be loaded
        """
        items = await self.client.get_menu()
        self.menu = {item.id: item for item in items}
        return items

    def add_to_cart(self, item_id: int) -> CartView:
        item = self.menu.get(item_id)
        if item is None:
            return self.view()

        self.cart.add(item)
        return self.view(message=f"Added {item.name} to the cart")

    def remove_from_cart(self, item_id: int) -> CartView:
        self.cart.remove(item_id)
        return self.view()

    def update_quantity(self, item_id: int, delta: int) -> CartView:
        self.cart.change_quantity(item_id, delta)
        return self.view()

    def open_order_form(self) -> CartView:
        """Show the order form, refusing while the cart is empty."""
        if self.cart.is_empty:
            return self.view(message="Please add dishes to the cart first", success=False)

        self.order_form_open = True
        return self.view()

    def close_order_form(self) -> None:
        self.order_form_open = False

    async def submit_order(
        self,
        customer_name: str,
        customer_phone: str,
        address: str,
        notes: str | None = None,
    ) -> tuple[CartView, SubmittedOrder | None]:
        """Submit the cart as an order.

        On success the cart is cleared and the order form closed. On failure
        the cart is left untouched so the customer can adjust it.

        Returns:
            Tuple of (view to render, receipt or None on failure)
        """
        if not customer_name.strip() or not customer_phone.strip() or not address.strip():
            view = self.view(message="Please fill in the complete order details", success=False)
            return view, None

        if self.cart.is_empty:
            return self.view(message="Please add dishes to the cart first", success=False), None

        try:
            receipt = await self.client.submit_order(
                customer_name=customer_name,
                customer_phone=customer_phone,
                address=address,
                notes=notes,
                lines=self.cart.to_order_lines(),
            )
        except KitchenApiError as e:
            logger.warning(f"Order submission failed: {e.message}")
            view = self.view(message=f"Order submission failed: {e.message}", success=False)
            return view, None

        logger.info(f"Order {receipt.order_id} submitted, total {receipt.total_amount}")
        self.cart.clear()
        self.close_order_form()
        return self.view(message="Order submitted successfully"), receipt
