"""Unit tests for tracing and logging setup."""

import json
import logging
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from kitchen_order_service.exceptions import InsufficientStock, StoreUnavailable
from kitchen_order_service.observability import configure_logging, metrics, traced


@pytest.fixture
def mock_span() -> MagicMock:
    """Patch the tracer used by @traced and return the span it yields."""
    span = MagicMock()
    tracer = MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = span
    with patch(
        "kitchen_order_service.observability.decorators.trace.get_tracer", return_value=tracer
    ):
        yield span


@pytest.mark.unit
class TestTraced:
    """Test suite for the @traced decorator."""

    def test_success_marks_span(self, mock_span: MagicMock) -> None:
        """Test that a normal return is recorded as success."""

        @traced("price_order")
        def price_order() -> int:
            return 42

        assert price_order() == 42
        mock_span.set_attribute.assert_any_call("success", True)
        mock_span.set_attribute.assert_any_call("function.name", "price_order")

    def test_rejection_is_not_recorded_as_exception(self, mock_span: MagicMock) -> None:
        """Test that client-side rejections only tag the span."""

        @traced()
        def submit() -> None:
            raise InsufficientStock(1, "Braised Pork", 3)

        with pytest.raises(InsufficientStock):
            submit()

        mock_span.set_attribute.assert_any_call("success", False)
        mock_span.set_attribute.assert_any_call("error.type", "InsufficientStock")
        mock_span.record_exception.assert_not_called()

    def test_server_fault_is_recorded(self, mock_span: MagicMock) -> None:
        """Test that store failures are recorded on the span."""
        error = StoreUnavailable("Database operation failed")

        @traced()
        def submit() -> None:
            raise error

        with pytest.raises(StoreUnavailable):
            submit()

        mock_span.record_exception.assert_called_once_with(error)

    @pytest.mark.asyncio
    async def test_async_function(self, mock_span: MagicMock) -> None:
        """Test that coroutines are traced too."""

        @traced("load_menu")
        async def load_menu() -> list[str]:
            return ["Braised Pork"]

        assert await load_menu() == ["Braised Pork"]
        mock_span.set_attribute.assert_any_call("success", True)


@pytest.mark.unit
class TestMetrics:
    """Test suite for the order metrics helpers."""

    def test_order_submitted_keeps_attributes_bounded(self) -> None:
        """Test that line counts go to a histogram instead of a counter attribute."""
        with (
            patch.object(metrics, "order_submitted_counter") as counter,
            patch.object(metrics, "order_amount_histogram") as amounts,
            patch.object(metrics, "order_lines_histogram") as line_counts,
        ):
            metrics.record_order_submitted(Decimal("33.00"), 2)

        counter.add.assert_called_once_with(1)
        amounts.record.assert_called_once_with(33.0)
        line_counts.record.assert_called_once_with(2)


@pytest.mark.unit
class TestConfigureLogging:
    """Test suite for configure_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self) -> None:
        root_logger = logging.getLogger()
        handlers, level = root_logger.handlers[:], root_logger.level
        yield
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)

    def test_logs_are_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that log records are written as JSON with the service tag."""
        with patch.dict("os.environ", {"LOG_LEVEL": "DEBUG"}):
            configure_logging()

        logging.getLogger("kitchen_order_service.test").info("Order 1 accepted")

        lines = [line for line in capsys.readouterr().err.splitlines() if line]
        record = json.loads(lines[-1])
        assert record["message"] == "Order 1 accepted"
        assert record["level"] == "INFO"
        assert record["service"] == "kitchen-svc"
        assert logging.getLogger().level == logging.DEBUG
