"""Shopping cart held by the ordering client."""

from dataclasses import dataclass
from decimal import Decimal

from kitchen_order_service.models.menu_models import MenuItem, OrderLine


@dataclass
class CartEntry:
    """A dish in the cart.

    Attributes:
        item_id: Menu item identifier
        name: Dish name as shown on the menu
        price: Unit price as shown on the menu
        quantity: Portions in the cart
    """

    item_id: int
    name: str
    price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """Mapping of menu item id to cart entry.

    Entries keep the order in which dishes were first added.
    """

    def __init__(self) -> None:
        self._entries: dict[int, CartEntry] = {}

    def add(self, item: MenuItem) -> CartEntry:
        """Add one portion of a dish."""
        entry = self._entries.get(item.id)
        if entry is None:
            entry = CartEntry(item_id=item.id, name=item.name, price=item.price, quantity=1)
            self._entries[item.id] = entry
        else:
            entry.quantity += 1
        return entry

    def remove(self, item_id: int) -> None:
        """Drop a dish from the cart; unknown ids are ignored."""
        self._entries.pop(item_id, None)

    def change_quantity(self, item_id: int, delta: int) -> None:
        """Adjust a dish's quantity, removing it once it reaches zero."""
        entry = self._entries.get(item_id)
        if entry is None:
            return

        entry.quantity += delta
        if entry.quantity <= 0:
            self.remove(item_id)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[CartEntry]:
        return list(self._entries.values())

    @property
    def total(self) -> Decimal:
        """Sum of price x quantity over all entries."""
        return sum((entry.subtotal for entry in self._entries.values()), Decimal("0"))

    @property
    def count(self) -> int:
        """Total number of portions in the cart."""
        return sum(entry.quantity for entry in self._entries.values())

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def to_order_lines(self) -> list[OrderLine]:
        """Package the cart as order lines for submission."""
        return [
            OrderLine(item_id=entry.item_id, quantity=entry.quantity)
            for entry in self._entries.values()
        ]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
