"""Order models.

These models represent submitted orders, their lifecycle status and the
read-only projections (pages, statistics) served by the admin endpoints.
"""

import math
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from kitchen_order_service.models.menu_models import Money


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values."""

    NEW = "新订单"
    CONFIRMED = "已确认"
    COMPLETED = "已完成"
    CANCELLED = "已取消"

    @classmethod
    def values(cls) -> list[str]:
        """Return the literal status values in lifecycle order."""
        return [status.value for status in cls]


class OrderLineSnapshot(BaseModel):
    """An order line as captured at submission time.

    Stores the dish name and unit price alongside the quantity so the order
    total can always be recomputed from the order alone.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Menu item identifier")
    qty: int = Field(..., description="Number of portions", gt=0)
    name: str = Field(..., description="Dish name at submission time")
    price: Money = Field(..., description="Unit price at submission time", ge=0)

    @property
    def subtotal(self) -> Decimal:
        """Price of this line."""
        return self.price * self.qty


class Order(BaseModel):
    """A customer order.

    Created once by the order service; ``status`` and ``updated_at`` are the
    only fields that change afterwards.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int = Field(..., description="Order identifier")
    customer_name: str = Field(..., description="Customer name")
    customer_phone: str = Field(..., description="Customer phone number")
    address: str = Field(..., description="Delivery address")
    lines: list[OrderLineSnapshot] = Field(
        ..., alias="order_items", description="Ordered dishes"
    )
    total_amount: Money = Field(..., description="Order total", ge=0)
    status: OrderStatusEnum = Field(..., description="Current order status")
    notes: str = Field(default="", description="Customer notes")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")


class OrderPage(BaseModel):
    """One page of orders plus the pagination arithmetic."""

    orders: list[Order]
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        """Number of pages needed to show every matching order."""
        return math.ceil(self.total / self.limit)

    def pagination(self) -> dict[str, Any]:
        """Return the pagination block of the orders listing response."""
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


class OrderStats(BaseModel):
    """Aggregate order counts and revenue."""

    total_orders: int = Field(default=0, ge=0)
    new_orders: int = Field(default=0, ge=0)
    completed_orders: int = Field(default=0, ge=0)
    total_revenue: Money = Field(default=Decimal("0"), ge=0)
