"""Menu data models.

These models represent dishes served by the kitchen and the lines a customer
asks for when ordering them.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Monetary values are exact decimals internally and plain JSON numbers on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique identifier for the menu item")
    name: str = Field(..., description="Dish name")
    price: Money = Field(..., description="Dish price", ge=0)
    description: str | None = Field(None, description="Dish description")
    stock: int = Field(..., description="Remaining portions", ge=0)
    is_available: bool = Field(default=True, description="Whether the dish can be ordered")


class OrderLine(BaseModel):
    """One (menu item, quantity) pair of a submitted order.

    The wire format uses the short keys ``id`` and ``qty``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    item_id: int = Field(..., alias="id", description="Menu item identifier")
    quantity: int = Field(..., alias="qty", description="Number of portions", gt=0)
