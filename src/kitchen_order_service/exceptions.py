"""Domain errors for the kitchen order service.

Every error carries the HTTP status code the API layer should answer with,
so handlers can map failures without knowing each error type.
"""


class KitchenError(Exception):
    """Base class for all kitchen order service errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(KitchenError):
    """Request data is missing or malformed."""

    status_code = 400


class EmptyOrder(KitchenError):
    """An order was submitted without any lines."""

    status_code = 400

    def __init__(self, message: str = "Order must contain at least one item") -> None:
        super().__init__(message)


class ItemNotFound(KitchenError):
    """A line references a menu item that does not exist or is unavailable."""

    status_code = 400

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Menu item {item_id} does not exist or is unavailable")
        self.item_id = item_id


class InsufficientStock(KitchenError):
    """A line asks for more than the item's remaining stock."""

    status_code = 400

    def __init__(self, item_id: int, item_name: str, remaining: int) -> None:
        super().__init__(f'Insufficient stock for "{item_name}", {remaining} remaining')
        self.item_id = item_id
        self.item_name = item_name
        self.remaining = remaining


class InvalidStatus(KitchenError):
    """A status value outside the order status enumeration."""

    status_code = 400

    def __init__(self, status: object, allowed: list[str]) -> None:
        super().__init__(f"Invalid status {status!r}, must be one of: {', '.join(allowed)}")
        self.status = status


class NotFound(KitchenError):
    """The requested order does not exist."""

    status_code = 404


class StoreUnavailable(KitchenError):
    """The database could not complete an operation."""

    status_code = 500


class BackupFailed(KitchenError):
    """The database backup could not be created or uploaded."""

    status_code = 500
