"""Custom metrics for the kitchen order service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("kitchen-svc")

order_submitted_counter = meter.create_counter(
    name="orders_submitted_total",
    description="Total number of accepted orders",
    unit="1",
)

order_rejected_counter = meter.create_counter(
    name="orders_rejected_total",
    description="Total number of rejected order submissions by reason",
    unit="1",
)

order_amount_histogram = meter.create_histogram(
    name="order_amount",
    description="Total amount of accepted orders",
    unit="1",
)

order_lines_histogram = meter.create_histogram(
    name="order_lines",
    description="Number of lines in accepted orders",
    unit="1",
)

status_update_counter = meter.create_counter(
    name="order_status_updates_total",
    description="Total number of order status changes by new status",
    unit="1",
)

backup_counter = meter.create_counter(
    name="database_backups_total",
    description="Total number of database backups by outcome",
    unit="1",
)


def record_order_submitted(total_amount: Decimal, line_count: int) -> None:
    """Record an accepted order.

    Args:
        total_amount: Order total
        line_count: Number of lines in the order
    """
    order_submitted_counter.add(1)
    order_amount_histogram.record(float(total_amount))
    order_lines_histogram.record(line_count)


def record_order_rejected(reason: str) -> None:
    """Record a rejected order submission.

    Args:
        reason: Error type that rejected the order (e.g., "InsufficientStock")
    """
    order_rejected_counter.add(1, {"reason": reason})


def record_status_update(status: str) -> None:
    """Record an order status change.

    Args:
        status: The new status value
    """
    status_update_counter.add(1, {"status": status})


def record_backup(success: bool) -> None:
    """Record the outcome of a database backup."""
    backup_counter.add(1, {"outcome": "success" if success else "failure"})
