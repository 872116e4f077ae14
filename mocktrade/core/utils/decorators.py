"""
Utility decorators for logging engine operations.
"""

import functools
import inspect
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger

from mocktrade.core.exceptions.trading import ExecutionDeferredError

F = TypeVar("F", bound=Callable[..., Any])

_CONTEXT_PARAMS = ("order", "quote", "symbol", "quantity", "price", "days", "older_than_days")


def _serialize_parameter_value(value: Any) -> Any:
    """Serialize parameter value for logging."""
    if hasattr(value, "log_context"):
        return value.log_context()
    elif hasattr(value, "micro_cents"):
        return str(value)  # Handle Money
    elif hasattr(value, "value") and hasattr(value, "name"):
        return str(value.value)  # Handle enum values
    else:
        return value


def _extract_context(func: Callable[..., Any], args: tuple, kwargs: dict) -> dict[str, Any]:
    """Extract logging context from function arguments."""
    sig = inspect.signature(func)
    bound_args = sig.bind(*args, **kwargs)
    bound_args.apply_defaults()

    context: dict[str, Any] = {"correlation_id": str(uuid.uuid4())[:8]}
    for param_name, value in bound_args.arguments.items():
        if param_name in _CONTEXT_PARAMS and value is not None:
            context[param_name] = _serialize_parameter_value(value)
    return context


def _result_context(result: Any) -> dict[str, Any]:
    if isinstance(result, bool | int | float | str):
        return {"result": result}
    if hasattr(result, "log_context"):
        return {"result": result.log_context()}
    return {"result_type": type(result).__name__}


def log_operation(func: F) -> F:
    """Decorator to log engine operations with correlation IDs.

    Deferrals are expected outcomes and are logged at debug level; every
    other exception is logged as an error and re-raised.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        context = _extract_context(func, args, kwargs)
        func_name = func.__name__
        logger.debug(f"Operation started: {func_name}", extra=context)
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except ExecutionDeferredError as e:
            elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.debug(
                f"Operation deferred: {func_name}: {e.reason}",
                extra={**context, "execution_time_ms": elapsed_ms},
            )
            raise
        except Exception as e:
            elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                f"Operation failed: {func_name}",
                extra={
                    **context,
                    "success": False,
                    "execution_time_ms": elapsed_ms,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise

        elapsed_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.success(
            f"Operation completed: {func_name}",
            extra={**context, "success": True, "execution_time_ms": elapsed_ms, **_result_context(result)},
        )
        return result

    return wrapper  # type: ignore
