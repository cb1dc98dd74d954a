"""Result type for CLI handlers.

Handlers report success or failure as a plain dict instead of raising, so the
click layer only has to look at ``ok`` and print ``error``.
"""

from typing import Any, Callable, Optional, TypedDict, TypeVar

T = TypeVar("T")


class Result(TypedDict):
    """Outcome of a handler call.

    Attributes:
        ok: True if the operation succeeded
        value: The produced value (None on failure)
        error: Error message (None on success)
    """

    ok: bool
    value: Optional[Any]
    error: Optional[str]


def success(value: T) -> Result:
    """Create a successful result."""
    return Result(ok=True, value=value, error=None)


def failure(error: str) -> Result:
    """Create a failed result."""
    return Result(ok=False, value=None, error=error)


def from_exception(exc: Exception) -> Result:
    """Create a failed result from an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Result with ok=False and "<ExceptionType>: <message>" as error
    """
    return failure(f"{type(exc).__name__}: {exc}")


def try_operation(operation: Callable[[], T]) -> Result:
    """Execute an operation and capture its outcome as a Result.

    Args:
        operation: Zero-argument callable to run

    Returns:
        Result with either the return value or the error
    """
    try:
        return success(operation())
    except Exception as exc:
        return from_exception(exc)
