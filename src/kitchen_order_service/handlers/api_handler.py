"""FastAPI application for the kitchen ordering API."""

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from kitchen_order_service.exceptions import KitchenError
from kitchen_order_service.models.menu_models import MenuItem, Money, OrderLine
from kitchen_order_service.models.order_models import Order, OrderStats
from kitchen_order_service.repositories.database import Database
from kitchen_order_service.services.backup_service import BackupService
from kitchen_order_service.services.menu_service import MenuService
from kitchen_order_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


class MenuResponse(BaseModel):
    """Response model for the menu listing."""

    success: bool = True
    data: list[MenuItem]


class OrderSubmission(BaseModel):
    """Request body for order submission.

    Customer fields default to empty so that missing values are reported by
    the order service with the same message as blank ones.
    """

    customer_name: str = ""
    customer_phone: str = ""
    address: str = ""
    notes: str | None = None
    order_items: list[OrderLine] | None = None


class OrderReceipt(BaseModel):
    """Identity and total of a newly created order."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: int = Field(..., alias="orderId")
    total_amount: Money = Field(..., alias="totalAmount")


class OrderCreatedResponse(BaseModel):
    """Response model for order submission."""

    success: bool = True
    message: str
    data: OrderReceipt


class Pagination(BaseModel):
    """Pagination block of the orders listing."""

    page: int
    limit: int
    total: int
    pages: int


class OrdersResponse(BaseModel):
    """Response model for the orders listing."""

    success: bool = True
    data: list[Order]
    pagination: Pagination


class StatusUpdate(BaseModel):
    """Request body for order status updates."""

    status: str | None = None


class MessageResponse(BaseModel):
    """Generic success response with a message."""

    success: bool = True
    message: str


class StatsResponse(BaseModel):
    """Response model for order statistics."""

    success: bool = True
    data: OrderStats


class BackupResponse(BaseModel):
    """Response model for database backups."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    backup_path: str = Field(..., alias="backupPath")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    database: str
    timestamp: str
    uptime: float | None = None


def _error_body(message: str, error: BaseException | None, expose_errors: bool) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    if expose_errors and error is not None:
        body["error"] = str(error)
    return body


def create_app(
    menu_service: MenuService,
    order_service: OrderService,
    backup_service: BackupService,
    database: Database,
    expose_errors: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        menu_service: Service for reading the menu
        order_service: Service for the order lifecycle
        backup_service: Service for database backups
        database: Store handle, used for health checks and shutdown
        expose_errors: Whether 500 responses include the underlying error text

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        logger.info("Shutting down, closing database connections")
        database.dispose()

    app = FastAPI(
        title="Kitchen Order Service API",
        description="Menu, ordering and order administration for a home kitchen",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Store services in app state for access in route handlers
    app.state.menu_service = menu_service
    app.state.order_service = order_service
    app.state.backup_service = backup_service
    app.state.database = database
    app.state.started_at = time.monotonic()

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
        )
        return response

    @app.exception_handler(KitchenError)
    async def handle_kitchen_error(_request: Request, exc: KitchenError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"Request failed: {exc.message}")
            cause = exc.__cause__ or exc
            return JSONResponse(
                status_code=exc.status_code,
                content=_error_body(exc.message, cause, expose_errors),
            )
        return JSONResponse(
            status_code=exc.status_code, content=_error_body(exc.message, None, False)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = "Invalid request"
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            if location:
                message = f"{message}: {location}"
            message = f"{message}: {first.get('msg')}"
        return JSONResponse(status_code=400, content=_error_body(message, None, False))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=_error_body(message, None, False))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", exc, expose_errors),
        )

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    def health_check() -> HealthResponse | JSONResponse:
        """Health check endpoint.

        Returns:
            Health status including database connectivity and uptime
        """
        timestamp = datetime.now(UTC).isoformat()

        if not app.state.database.ping():
            return JSONResponse(
                status_code=500,
                content=HealthResponse(
                    status="ERROR", database="disconnected", timestamp=timestamp
                ).model_dump(exclude_none=True),
            )

        return HealthResponse(
            status="OK",
            database="connected",
            timestamp=timestamp,
            uptime=round(time.monotonic() - app.state.started_at, 3),
        )

    @app.get("/api/menu", response_model=MenuResponse, tags=["Menu"])
    def get_menu() -> MenuResponse:
        """List the dishes that can currently be ordered."""
        items: list[MenuItem] = app.state.menu_service.list_available_items()
        return MenuResponse(data=items)

    @app.post("/api/order", response_model=OrderCreatedResponse, tags=["Orders"])
    def submit_order(submission: OrderSubmission) -> OrderCreatedResponse:
        """Submit a new order.

        Args:
            submission: Customer details and requested dishes

        Returns:
            The new order's id and total
        """
        order: Order = app.state.order_service.submit_order(
            customer_name=submission.customer_name,
            customer_phone=submission.customer_phone,
            address=submission.address,
            notes=submission.notes,
            lines=submission.order_items,
        )
        return OrderCreatedResponse(
            message="Order submitted successfully",
            data=OrderReceipt(order_id=order.id, total_amount=order.total_amount),
        )

    @app.get("/api/orders", response_model=OrdersResponse, tags=["Orders"])
    def list_orders(
        status: str | None = Query(default=None),
        page: int = Query(default=1),
        limit: int = Query(default=50),
    ) -> OrdersResponse:
        """List orders newest first.

        Args:
            status: Optional status filter ("all" for every status)
            page: 1-based page number
            limit: Page size

        Returns:
            One page of orders with pagination info
        """
        order_page = app.state.order_service.list_orders(
            status=status or None, page=page, limit=limit
        )
        return OrdersResponse(
            data=order_page.orders,
            pagination=Pagination(**order_page.pagination()),
        )

    @app.put("/api/order/{order_id}", response_model=MessageResponse, tags=["Orders"])
    def update_order_status(order_id: int, update: StatusUpdate) -> MessageResponse:
        """Change an order's status.

        Args:
            order_id: The order to update
            update: Body carrying the new status

        Returns:
            Confirmation message
        """
        app.state.order_service.update_status(order_id, update.status)
        return MessageResponse(message="Order status updated successfully")

    @app.get("/api/stats", response_model=StatsResponse, tags=["Orders"])
    def get_stats() -> StatsResponse:
        """Aggregate order counts and revenue."""
        stats: OrderStats = app.state.order_service.get_stats()
        return StatsResponse(data=stats)

    @app.post("/api/backup", response_model=BackupResponse, tags=["Admin"])
    def create_backup() -> BackupResponse:
        """Back up the database.

        Returns:
            Path of the created backup
        """
        backup_path: str = app.state.backup_service.create_backup()
        return BackupResponse(message="Backup created successfully", backup_path=backup_path)

    return app
