"""
Custom exceptions for the ClickUp integration.

This module defines a hierarchy of exceptions for talking to ClickUp,
providing structured error handling with context preservation.

Exception Hierarchy:
    ClickUpError (base)
    ├── RemoteThrottledError (429 persisted after the single retry)
    ├── RemoteTransportError (any other HTTP or network failure)
    ├── WorkspaceNotFoundError (team or space could not be resolved)
    └── CustomFieldNotFoundError (named custom field missing on a list)

Example:
    >>> from spectrack.core.clickup.exceptions import RemoteTransportError
    >>> try:
    ...     raise RemoteTransportError("GET /team failed", status_code=500)
    ... except RemoteTransportError as e:
    ...     print(f"{e} (status {e.status_code})")
"""


class ClickUpError(Exception):
    """
    Base exception for all ClickUp errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class RemoteThrottledError(ClickUpError):
    """
    Raised when ClickUp still answers 429 after the one permitted retry.

    Attributes:
        retry_after: Seconds the server asked to wait on the last response
    """

    def __init__(self, message: str, retry_after: float, **context: object) -> None:
        super().__init__(message, retry_after=retry_after, **context)
        self.retry_after = retry_after


class RemoteTransportError(ClickUpError):
    """
    Exception for non-throttling HTTP and network failures.

    The original httpx exception is preserved via ``__cause__``.

    Attributes:
        status_code: HTTP status of the failed response, None for network errors
    """

    def __init__(self, message: str, status_code: int | None = None, **context: object) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code


class WorkspaceNotFoundError(ClickUpError):
    """Raised when the configured team or space does not exist."""

    def __init__(self, message: str, available: list[str] | None = None) -> None:
        super().__init__(message, available=available or [])
        self.available = available or []

    def __str__(self) -> str:
        if self.available:
            return f"{self.message}. Available: {', '.join(self.available)}"
        return self.message


class CustomFieldNotFoundError(ClickUpError):
    """Raised when a list has no custom field with the requested name."""

    def __init__(self, field_name: str, list_id: str, available: list[str]) -> None:
        super().__init__(
            f"Custom field '{field_name}' not found in list {list_id}",
            list_id=list_id,
            available=available,
        )
        self.field_name = field_name
        self.list_id = list_id
        self.available = available

    def __str__(self) -> str:
        names = ", ".join(self.available) or "none"
        return f"{self.message}. Available fields: {names}"


__all__ = [
    "ClickUpError",
    "RemoteThrottledError",
    "RemoteTransportError",
    "WorkspaceNotFoundError",
    "CustomFieldNotFoundError",
]
