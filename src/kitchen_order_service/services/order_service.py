"""Order service for submitting, listing and updating customer orders."""

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from kitchen_order_service.exceptions import (
    InsufficientStock,
    InvalidInput,
    InvalidStatus,
    KitchenError,
    NotFound,
)
from kitchen_order_service.models.menu_models import OrderLine
from kitchen_order_service.models.order_models import Order, OrderPage, OrderStats, OrderStatusEnum
from kitchen_order_service.observability.decorators import traced
from kitchen_order_service.observability.metrics import (
    record_order_rejected,
    record_order_submitted,
    record_status_update,
)
from kitchen_order_service.repositories.database import Database
from kitchen_order_service.repositories.menu_repository import MenuRepository
from kitchen_order_service.repositories.order_repository import OrderRepository
from kitchen_order_service.repositories.tables import fits_integer
from kitchen_order_service.services.order_pricing import snapshot_lines, validate_and_price

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


def _parse_lines(lines: Any) -> list[OrderLine]:
    """Coerce raw or typed lines into OrderLine objects.

    Raises:
        InvalidInput: If lines is not a sequence of well-formed lines
    """
    if lines is None or isinstance(lines, (str, bytes)) or not isinstance(lines, Sequence):
        raise InvalidInput("Order items must be a list of {id, qty} entries")

    parsed: list[OrderLine] = []
    for line in lines:
        if isinstance(line, OrderLine):
            parsed.append(line)
            continue
        try:
            parsed.append(OrderLine.model_validate(line))
        except ValidationError as e:
            raise InvalidInput(f"Malformed order item: {line!r}") from e

    return parsed


def _parse_status(status: Any) -> OrderStatusEnum:
    try:
        return OrderStatusEnum(status)
    except ValueError as e:
        raise InvalidStatus(status, OrderStatusEnum.values()) from e


class OrderService:
    """Service for the order lifecycle.

    Submission runs validation, the order insert and the stock decrements in
    one unit of work, so an order is only durable once every line's stock has
    been taken.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the OrderService.

        Args:
            database: Store handle providing units of work
        """
        self.database = database

    @traced("submit_order")
    def submit_order(
        self,
        customer_name: str,
        customer_phone: str,
        address: str,
        notes: str | None,
        lines: Sequence[OrderLine] | Sequence[dict[str, Any]],
    ) -> Order:
        """Validate, price and persist a new order.

        This method runs the complete submission flow:
        1. Check customer details and line shape
        2. Lock and validate the referenced menu items
        3. Insert the order with status NEW
        4. Decrement stock for every line

        Args:
            customer_name: Customer name
            customer_phone: Customer phone number
            address: Delivery address
            notes: Optional customer notes
            lines: Requested order lines

        Returns:
            Order: The persisted order

        Raises:
            InvalidInput: If customer details are missing or lines are malformed
            EmptyOrder: If there are no lines
            ItemNotFound: If a line references a missing or unavailable item
            InsufficientStock: If a line asks for more than the remaining stock
            StoreUnavailable: If the database fails
        """
        try:
            for field_name, value in (
                ("customer_name", customer_name),
                ("customer_phone", customer_phone),
                ("address", address),
            ):
                if not isinstance(value, str) or not value.strip():
                    raise InvalidInput(
                        "Please provide complete order details (name, phone, address, dishes)"
                        f": {field_name} is missing"
                    )

            order_lines = _parse_lines(lines)

            with self.database.unit_of_work(immediate=True) as session:
                menu_repository = MenuRepository(session)
                order_repository = OrderRepository(session)

                snapshot = menu_repository.get_snapshot(
                    (line.item_id for line in order_lines), lock=True
                )
                total_amount = validate_and_price(order_lines, snapshot)

                order = order_repository.create_order(
                    customer_name=customer_name.strip(),
                    customer_phone=customer_phone.strip(),
                    address=address.strip(),
                    lines=snapshot_lines(order_lines, snapshot),
                    total_amount=total_amount,
                    notes=(notes or "").strip(),
                )

                for line in order_lines:
                    if not menu_repository.decrement_stock(line.item_id, line.quantity):
                        current = menu_repository.get_item(line.item_id)
                        item = current or snapshot[line.item_id]
                        raise InsufficientStock(item.id, item.name, item.stock)

        except KitchenError as e:
            logger.info(f"Order submission rejected: {e.message}")
            record_order_rejected(type(e).__name__)
            raise

        logger.info(
            f"Order {order.id} accepted: {len(order.lines)} lines, total {order.total_amount}"
        )
        record_order_submitted(order.total_amount, len(order.lines))
        return order

    @traced("update_order_status")
    def update_status(self, order_id: int, new_status: Any) -> Order:
        """Change an order's status.

        The status is checked before the order is looked up. Stock is never
        touched.

        Args:
            order_id: Order identifier
            new_status: One of the OrderStatusEnum values

        Returns:
            Order: The updated order

        Raises:
            InvalidStatus: If new_status is not a known status
            NotFound: If no order has that id
        """
        status = _parse_status(new_status)

        with self.database.unit_of_work(immediate=True) as session:
            order = OrderRepository(session).update_status(order_id, status)

        if order is None:
            raise NotFound(f"Order {order_id} not found")

        logger.info(f"Order {order_id} status changed to {status.value}")
        record_status_update(status.value)
        return order

    def get_order(self, order_id: int) -> Order:
        """Retrieve a single order.

        Raises:
            NotFound: If no order has that id
        """
        with self.database.unit_of_work() as session:
            order = OrderRepository(session).get_order(order_id)

        if order is None:
            raise NotFound(f"Order {order_id} not found")
        return order

    def list_orders(self, status: str | None = None, page: int = 1, limit: int = 50) -> OrderPage:
        """List orders newest first, one page at a time.

        Args:
            status: Optional status filter; None or "all" disables filtering
            page: 1-based page number
            limit: Page size

        Returns:
            OrderPage: The requested page with total count

        Raises:
            InvalidInput: If page or limit is below 1 or too large to query
            InvalidStatus: If status is not a known status
        """
        if page < 1 or limit < 1:
            raise InvalidInput("page and limit must be positive integers")

        offset = (page - 1) * limit
        if not fits_integer(offset) or not fits_integer(limit):
            raise InvalidInput("page or limit is too large")

        status_filter = None
        if status is not None and status != ALL_STATUSES:
            status_filter = _parse_status(status)

        with self.database.unit_of_work() as session:
            repository = OrderRepository(session)
            orders = repository.list_orders(
                status=status_filter, offset=offset, limit=limit
            )
            total = repository.count_orders(status=status_filter)

        return OrderPage(orders=orders, page=page, limit=limit, total=total)

    def get_stats(self) -> OrderStats:
        """Aggregate order counts and revenue."""
        with self.database.unit_of_work() as session:
            return OrderRepository(session).get_stats()
