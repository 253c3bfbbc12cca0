"""Client for interacting with the Kitchen Order Service API."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import httpx

from kitchen_order_service.models.menu_models import MenuItem, OrderLine
from kitchen_order_service.models.order_models import Order, OrderStats

logger = logging.getLogger(__name__)


class KitchenApiError(Exception):
    """The API rejected a request or could not be reached.

    Attributes:
        status_code: HTTP status of the failed response, None for network errors
        message: Human-readable message from the API
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class SubmittedOrder:
    """Receipt returned after a successful order submission."""

    order_id: int
    total_amount: Decimal


class KitchenApiClient:
    """HTTP client for the ordering API.

    Each call opens its own ``httpx.AsyncClient``; pass ``transport`` to route
    requests somewhere other than the network.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the service (e.g., "http://localhost:3000")
            timeout: Request timeout in seconds
            transport: Optional httpx transport
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise KitchenApiError(None, f"Could not reach the kitchen service: {e}") from e

        try:
            body: dict[str, Any] = response.json()
        except ValueError:
            body = {}

        if response.is_error or body.get("success") is False:
            message = body.get("message") or f"Request failed with status {response.status_code}"
            logger.warning(f"{method} {path} rejected ({response.status_code}): {message}")
            raise KitchenApiError(response.status_code, message)

        return body

    async def get_menu(self) -> list[MenuItem]:
        """Fetch the dishes that can currently be ordered."""
        body = await self._request("GET", "/api/menu")
        return [MenuItem.model_validate(item) for item in body.get("data", [])]

    async def submit_order(
        self,
        customer_name: str,
        customer_phone: str,
        address: str,
        lines: list[OrderLine],
        notes: str | None = None,
    ) -> SubmittedOrder:
        """Submit an order.

        Args:
            customer_name: Customer name
            customer_phone: Customer phone number
            address: Delivery address
            lines: Order lines to submit
            notes: Optional customer notes

        Returns:
            SubmittedOrder with the new order's id and total

        Raises:
            KitchenApiError: If the order was rejected or the service is unreachable
        """
        payload = {
            "customer_name": customer_name,
            "customer_phone": customer_phone,
            "address": address,
            "notes": notes or "",
            "order_items": [line.model_dump(by_alias=True) for line in lines],
        }
        body = await self._request("POST", "/api/order", json=payload)
        data = body["data"]
        return SubmittedOrder(
            order_id=data["orderId"],
            total_amount=Decimal(str(data["totalAmount"])),
        )

    async def list_orders(
        self, status: str | None = None, page: int = 1, limit: int = 50
    ) -> tuple[list[Order], dict[str, int]]:
        """Fetch one page of orders.

        Returns:
            Tuple of (orders, pagination block)
        """
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status

        body = await self._request("GET", "/api/orders", params=params)
        orders = [Order.model_validate(order) for order in body.get("data", [])]
        return orders, body.get("pagination", {})

    async def update_order_status(self, order_id: int, status: str) -> None:
        """Change an order's status."""
        await self._request("PUT", f"/api/order/{order_id}", json={"status": status})

    async def get_stats(self) -> OrderStats:
        """Fetch aggregate order statistics."""
        body = await self._request("GET", "/api/stats")
        return OrderStats.model_validate(body["data"])

    async def health(self) -> dict[str, Any]:
        """Fetch the service health report."""
        return await self._request("GET", "/api/health")
