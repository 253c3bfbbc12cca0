"""Menu service for listing dishes and seeding the sample menu."""

import logging
from decimal import Decimal

from kitchen_order_service.models.menu_models import MenuItem
from kitchen_order_service.repositories.database import Database
from kitchen_order_service.repositories.menu_repository import MenuRepository

logger = logging.getLogger(__name__)

# (name, price, description, stock)
SAMPLE_MENU: list[tuple[str, Decimal, str, int]] = [
    ("红烧肉", Decimal("38.00"), "Braised pork belly in soy sauce", 20),
    ("宫保鸡丁", Decimal("28.00"), "Kung pao chicken with peanuts", 25),
    ("麻婆豆腐", Decimal("18.00"), "Spicy tofu with minced beef", 30),
    ("番茄炒蛋", Decimal("15.00"), "Stir-fried tomato and egg", 30),
    ("酸辣土豆丝", Decimal("12.00"), "Hot and sour shredded potato", 40),
    ("米饭", Decimal("2.00"), "Steamed rice", 100),
]


class MenuService:
    """Service for reading the menu."""

    def __init__(self, database: Database) -> None:
        """Initialize the MenuService.

        Args:
            database: Store handle providing units of work
        """
        self.database = database

    def list_available_items(self) -> list[MenuItem]:
        """List every dish that can currently be ordered, ordered by id."""
        with self.database.unit_of_work() as session:
            return MenuRepository(session).list_available()

    def seed_sample_menu(self) -> int:
        """Insert the sample dishes into an empty menu.

        Returns:
            int: Number of dishes inserted (0 if the menu already had items)
        """
        with self.database.unit_of_work() as session:
            repository = MenuRepository(session)
            if repository.count() > 0:
                logger.info("Menu already populated, skipping sample menu")
                return 0

            for name, price, description, stock in SAMPLE_MENU:
                repository.add_item(name=name, price=price, stock=stock, description=description)

        logger.info(f"Seeded {len(SAMPLE_MENU)} sample menu items")
        return len(SAMPLE_MENU)
