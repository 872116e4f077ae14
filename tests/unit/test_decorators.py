"""
Unit tests for the log_operation decorator.
"""
# ruff: noqa: ARG001

from unittest.mock import Mock, patch

import pytest

from mocktrade.core.exceptions.trading import AccountError, ExecutionDeferredError
from mocktrade.core.types.financial import Money
from mocktrade.core.utils.decorators import log_operation


class TestLogOperationDecorator:
    """Test suite for @log_operation decorator."""

    @patch("mocktrade.core.utils.decorators.logger")
    def test_should_log_start_and_success(self, mock_logger: Mock) -> None:
        """Test that decorator logs entry and successful completion."""

        @log_operation
        def test_function(symbol: str, quantity: int, price: Money) -> bool:
            return True

        # Act
        result = test_function("ACME", 10, Money.from_dollars("50"))

        # Assert
        assert result is True
        assert mock_logger.debug.call_count == 1
        assert mock_logger.success.call_count == 1

        entry_call = mock_logger.debug.call_args
        assert "Operation started: test_function" in entry_call[0][0]
        entry_context = entry_call[1]["extra"]
        assert len(entry_context["correlation_id"]) == 8
        assert entry_context["symbol"] == "ACME"
        assert entry_context["quantity"] == 10
        assert entry_context["price"] == "$50.00"

        success_context = mock_logger.success.call_args[1]["extra"]
        assert success_context["success"] is True
        assert success_context["result"] is True
        assert success_context["correlation_id"] == entry_context["correlation_id"]
        assert "execution_time_ms" in success_context

    @patch("mocktrade.core.utils.decorators.logger")
    def test_should_log_deferral_at_debug_and_reraise(self, mock_logger: Mock) -> None:
        """Test that deferrals are not treated as errors."""

        @log_operation
        def test_function(symbol: str) -> None:
            raise ExecutionDeferredError(1, "quote is not current")

        # Act & Assert
        with pytest.raises(ExecutionDeferredError):
            test_function("ACME")

        assert mock_logger.error.call_count == 0
        assert mock_logger.success.call_count == 0
        assert "quote is not current" in mock_logger.debug.call_args[0][0]

    @patch("mocktrade.core.utils.decorators.logger")
    def test_should_log_failure_and_reraise(self, mock_logger: Mock) -> None:
        """Test that other errors are logged as errors and propagated."""

        @log_operation
        def test_function(symbol: str) -> None:
            raise AccountError("no such account")

        # Act & Assert
        with pytest.raises(AccountError, match="no such account"):
            test_function("ACME")

        error_context = mock_logger.error.call_args[1]["extra"]
        assert error_context["success"] is False
        assert error_context["error_type"] == "AccountError"
        assert error_context["error_message"] == "no such account"

    def test_should_preserve_function_metadata(self) -> None:
        @log_operation
        def documented(symbol: str) -> str:
            """Docstring kept."""
            return symbol

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring kept."
        assert documented("ACME") == "ACME"
