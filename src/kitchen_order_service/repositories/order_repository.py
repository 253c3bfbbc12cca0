"""Repository for customer orders."""

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from kitchen_order_service.models.order_models import (
    Order,
    OrderLineSnapshot,
    OrderStats,
    OrderStatusEnum,
)
from kitchen_order_service.repositories.tables import OrderRow, fits_integer, utc_now

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _to_order(row: OrderRow) -> Order:
    return Order(
        id=row.id,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        address=row.address,
        lines=[OrderLineSnapshot(**line) for line in row.order_items],
        total_amount=row.total_amount,
        status=OrderStatusEnum(row.status),
        notes=row.notes or "",
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class OrderRepository:
    """Repository for order CRUD operations and aggregates."""

    def __init__(self, session: Session) -> None:
        """Initialize repository.

        Args:
            session: Session of the current unit of work
        """
        self.session = session

    def create_order(
        self,
        customer_name: str,
        customer_phone: str,
        address: str,
        lines: Sequence[OrderLineSnapshot],
        total_amount: Decimal,
        notes: str = "",
    ) -> Order:
        """Insert a new order with status NEW.

        Args:
            customer_name: Customer name
            customer_phone: Customer phone number
            address: Delivery address
            lines: Snapshotted order lines
            total_amount: Precomputed order total
            notes: Customer notes

        Returns:
            Order: The persisted order with its assigned id
        """
        now = utc_now()
        row = OrderRow(
            customer_name=customer_name,
            customer_phone=customer_phone,
            address=address,
            order_items=[line.model_dump(mode="json") for line in lines],
            total_amount=total_amount,
            status=OrderStatusEnum.NEW.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        self.session.flush()
        return _to_order(row)

    def get_order(self, order_id: int) -> Order | None:
        """Retrieve an order by id.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise
        """
        if not fits_integer(order_id):
            return None

        row = self.session.get(OrderRow, order_id)
        return _to_order(row) if row is not None else None

    def update_status(self, order_id: int, status: OrderStatusEnum) -> Order | None:
        """Set an order's status and refresh its modification time.

        Args:
            order_id: Order identifier
            status: New status

        Returns:
            Order: The updated order, or None if no such order exists
        """
        if not fits_integer(order_id):
            return None

        row = self.session.get(OrderRow, order_id)
        if row is None:
            return None

        row.status = status.value
        row.updated_at = utc_now()
        self.session.flush()
        return _to_order(row)

    def list_orders(
        self, status: OrderStatusEnum | None = None, offset: int = 0, limit: int = 50
    ) -> list[Order]:
        """List orders, newest first.

        Args:
            status: Optional status filter
            offset: Number of orders to skip
            limit: Maximum number of orders to return

        Returns:
            list: List of Order objects (empty list if none found)
        """
        statement = select(OrderRow)
        if status is not None:
            statement = statement.where(OrderRow.status == status.value)

        statement = (
            statement.order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [_to_order(row) for row in self.session.scalars(statement)]

    def count_orders(self, status: OrderStatusEnum | None = None) -> int:
        """Count orders, optionally only those with the given status."""
        statement = select(func.count()).select_from(OrderRow)
        if status is not None:
            statement = statement.where(OrderRow.status == status.value)
        return self.session.scalar(statement) or 0

    def get_stats(self) -> OrderStats:
        """Aggregate order counts by status and total revenue.

        Returns:
            OrderStats: Aggregates over every order (zeros when there are none)
        """
        row = self.session.execute(
            select(
                func.count(OrderRow.id),
                func.coalesce(
                    func.sum(case((OrderRow.status == OrderStatusEnum.NEW.value, 1), else_=0)), 0
                ),
                func.coalesce(
                    func.sum(case((OrderRow.status == OrderStatusEnum.COMPLETED.value, 1), else_=0)),
                    0,
                ),
                func.coalesce(func.sum(OrderRow.total_amount), 0),
            )
        ).one()

        total_orders, new_orders, completed_orders, total_revenue = row
        return OrderStats(
            total_orders=total_orders,
            new_orders=new_orders,
            completed_orders=completed_orders,
            total_revenue=Decimal(str(total_revenue)).quantize(Decimal("0.01")),
        )
