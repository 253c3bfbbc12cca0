"""SQLAlchemy table definitions for the kitchen store."""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Bounds of a 64-bit INTEGER column; drivers refuse to bind anything wider
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1


def utc_now() -> datetime:
    return datetime.now(UTC)


def fits_integer(value: int) -> bool:
    """Whether ``value`` can be bound to an INTEGER column."""
    return INTEGER_MIN <= value <= INTEGER_MAX


class MenuItemRow(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_menu_items_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text)
    stock = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self) -> str:
        return f"<MenuItemRow(id={self.id}, name='{self.name}', stock={self.stock})>"


class OrderRow(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=False)
    # Snapshot of the submitted lines: [{"id", "qty", "name", "price"}, ...]
    order_items = Column(JSON, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(16), nullable=False, index=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<OrderRow(id={self.id}, status='{self.status}', total={self.total_amount})>"
