"""Repository for menu items.

A repository is bound to one session, so every call it makes joins the unit
of work that created it.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from kitchen_order_service.models.menu_models import MenuItem
from kitchen_order_service.repositories.tables import MenuItemRow, fits_integer

logger = logging.getLogger(__name__)


class MenuRepository:
    """Repository for menu item reads and stock updates."""

    def __init__(self, session: Session) -> None:
        """Initialize repository.

        Args:
            session: Session of the current unit of work
        """
        self.session = session

    def list_available(self) -> list[MenuItem]:
        """List available menu items ordered by id.

        Returns:
            list: Available MenuItem objects (empty list if none)
        """
        rows = self.session.scalars(
            select(MenuItemRow).where(MenuItemRow.is_available.is_(True)).order_by(MenuItemRow.id)
        )
        return [MenuItem.model_validate(row) for row in rows]

    def get_snapshot(self, item_ids: Iterable[int], lock: bool = False) -> dict[int, MenuItem]:
        """Load the given menu items keyed by id.

        Unavailable items are included; callers decide how to treat them.

        Args:
            item_ids: Menu item identifiers to load
            lock: Whether to lock the rows for the rest of the transaction

        Returns:
            dict: Mapping of item id to MenuItem for the ids that exist
        """
        # Ids outside the INTEGER range cannot exist
        ids = sorted({item_id for item_id in item_ids if fits_integer(item_id)})
        if not ids:
            return {}

        statement = select(MenuItemRow).where(MenuItemRow.id.in_(ids)).order_by(MenuItemRow.id)
        if lock:
            statement = statement.with_for_update()

        return {row.id: MenuItem.model_validate(row) for row in self.session.scalars(statement)}

    def get_item(self, item_id: int) -> MenuItem | None:
        """Retrieve a single menu item.

        Args:
            item_id: Menu item identifier

        Returns:
            MenuItem if found, None otherwise
        """
        if not fits_integer(item_id):
            return None

        # Re-read the row so stock changed by decrement_stock is visible
        row = self.session.get(MenuItemRow, item_id, populate_existing=True)
        return MenuItem.model_validate(row) if row is not None else None

    def decrement_stock(self, item_id: int, quantity: int) -> bool:
        """Take ``quantity`` portions out of an item's stock.

        The update only applies while enough stock remains, so stock can never
        go negative even if the snapshot used for validation is stale.

        Args:
            item_id: Menu item identifier
            quantity: Portions to remove

        Returns:
            bool: True if the stock was decremented, False if not enough remained
        """
        if not fits_integer(item_id) or not fits_integer(quantity):
            return False

        result = self.session.execute(
            update(MenuItemRow)
            .where(MenuItemRow.id == item_id, MenuItemRow.stock >= quantity)
            .values(stock=MenuItemRow.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def count(self) -> int:
        """Count all menu items, available or not."""
        return self.session.scalar(select(func.count()).select_from(MenuItemRow)) or 0

    def add_item(
        self,
        name: str,
        price: Decimal,
        stock: int,
        description: str | None = None,
        is_available: bool = True,
    ) -> MenuItem:
        """Insert a menu item.

        Args:
            name: Dish name
            price: Dish price
            stock: Initial portions
            description: Optional dish description
            is_available: Whether the dish can be ordered

        Returns:
            MenuItem: The persisted item with its assigned id
        """
        row = MenuItemRow(
            name=name,
            price=price,
            stock=stock,
            description=description,
            is_available=is_available,
        )
        self.session.add(row)
        self.session.flush()
        logger.debug(f"Added menu item {row.id}: {name}")
        return MenuItem.model_validate(row)
