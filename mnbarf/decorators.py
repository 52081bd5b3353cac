from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable

from .core.exceptions import MnbError

_logger = logging.getLogger("mnbarf.service")


def log_operation(operation: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator to log facade operations at INFO level.

    Logs the SOAP operation name, duration and result (OK/ERROR). Errors
    from this package get `operation` set and a note naming the operation;
    they are re-raised, never swallowed.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            t0 = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except MnbError as exc:
                elapsed_ms = int((time.perf_counter() - t0) * 1000)
                if exc.operation is None:
                    exc.operation = operation
                    exc.add_note(f"operation: {operation}")
                _logger.info(
                    "%s result=ERROR ms=%d error_type=%s error_message='%s'",
                    operation,
                    elapsed_ms,
                    type(exc).__name__,
                    str(exc).replace("'", "\\'"),
                )
                raise
            elapsed_ms = int((time.perf_counter() - t0) * 1000)
            size = len(result) if isinstance(result, (list, tuple)) else 1
            _logger.info("%s result=OK ms=%d items=%d", operation, elapsed_ms, size)
            return result

        return wrapper

    return decorator
