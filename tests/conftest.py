"""Shared pytest fixtures and configuration for all tests."""

import os

# Keep src/main.py from building the production app during collection
os.environ.setdefault("ENVIRONMENT", "test")

from decimal import Decimal  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from kitchen_order_service.models.menu_models import MenuItem  # noqa: E402
from kitchen_order_service.repositories.database import Database  # noqa: E402
from kitchen_order_service.repositories.menu_repository import MenuRepository  # noqa: E402


def add_menu_items(database: Database, items: list[dict]) -> list[MenuItem]:
    """Insert menu items and return them with their assigned ids."""
    with database.unit_of_work() as session:
        repository = MenuRepository(session)
        return [repository.add_item(**item) for item in items]


@pytest.fixture
def mock_menu_items() -> list[dict]:
    """Fixture providing sample menu rows for testing."""
    return [
        {
            "name": "Braised Pork",
            "price": Decimal("12.50"),
            "description": "Slow braised pork belly",
            "stock": 3,
        },
        {
            "name": "Fried Rice",
            "price": Decimal("8.00"),
            "description": None,
            "stock": 10,
        },
        {
            "name": "Seasonal Soup",
            "price": Decimal("6.00"),
            "description": "Sold out for the season",
            "stock": 5,
            "is_available": False,
        },
    ]


@pytest.fixture
def database() -> Database:
    """Fixture providing an empty in-memory database with the schema created."""
    db = Database.from_url("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def seeded_database(database: Database, mock_menu_items: list[dict]) -> Database:
    """Fixture providing an in-memory database holding the sample menu rows."""
    add_menu_items(database, mock_menu_items)
    return database


@pytest.fixture
def file_database(tmp_path: Path) -> Database:
    """Fixture providing a file-backed SQLite database."""
    db = Database.from_url(f"sqlite:///{tmp_path / 'kitchen.db'}")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def customer() -> dict[str, str]:
    """Fixture providing standard customer details."""
    return {
        "customer_name": "Li Lei",
        "customer_phone": "13800000000",
        "address": "12 Garden Road",
    }
