"""Order validation and pricing.

Pure functions over a menu snapshot: nothing here touches the store.
"""

from collections import defaultdict
from collections.abc import Mapping, Sequence
from decimal import Decimal

from kitchen_order_service.exceptions import EmptyOrder, InsufficientStock, ItemNotFound
from kitchen_order_service.models.menu_models import MenuItem, OrderLine
from kitchen_order_service.models.order_models import OrderLineSnapshot


def validate_and_price(lines: Sequence[OrderLine], snapshot: Mapping[int, MenuItem]) -> Decimal:
    """Check order lines against a menu snapshot and compute the order total.

    Lines are checked in order and the first violation is raised. Quantities
    for the same item across several lines count against its stock together.

    Args:
        lines: Requested order lines
        snapshot: Current menu items keyed by id

    Returns:
        Decimal: Sum of price x quantity over all lines

    Raises:
        EmptyOrder: If there are no lines
        ItemNotFound: If a line references a missing or unavailable item
        InsufficientStock: If a line asks for more than the remaining stock
    """
    if not lines:
        raise EmptyOrder()

    requested: dict[int, int] = defaultdict(int)
    total = Decimal("0")

    for line in lines:
        item = snapshot.get(line.item_id)
        if item is None or not item.is_available:
            raise ItemNotFound(line.item_id)

        requested[item.id] += line.quantity
        if requested[item.id] > item.stock:
            raise InsufficientStock(item.id, item.name, item.stock)

        total += item.price * line.quantity

    return total


def snapshot_lines(
    lines: Sequence[OrderLine], snapshot: Mapping[int, MenuItem]
) -> list[OrderLineSnapshot]:
    """Capture name and unit price for each line at submission time.

    Call only after ``validate_and_price`` accepted the lines.
    """
    return [
        OrderLineSnapshot(
            id=line.item_id,
            qty=line.quantity,
            name=snapshot[line.item_id].name,
            price=snapshot[line.item_id].price,
        )
        for line in lines
    ]
