"""Custom exceptions for Keenetic RCI operations.

All exceptions inherit from KeeneticError for consistent error handling.
The hierarchy is flat: every concrete error is a direct child of the base.
"""

from typing import Any, Optional


class KeeneticError(Exception):
    """Base exception for all Keenetic client errors.

    Attributes:
        message: Human-readable error message.
        hint: Optional troubleshooting hint.
        exit_code: Suggested exit code for CLI applications.
    """

    exit_code: int = 4

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional hint."""
        if self.hint:
            return f"{self.message}\n\nHint: {self.hint}"
        return self.message


class ConfigurationError(KeeneticError):
    """Configuration is incomplete or invalid.

    Always detected locally, before anything is sent to the router.
    """

    exit_code: int = 1


class AuthenticationError(KeeneticError):
    """The challenge-response handshake with the router failed.

    This typically occurs when:
    - Login or password is wrong
    - The router did not send X-NDM-Challenge / X-NDM-Realm headers
    - Something other than a Keenetic router answers on the host
    """

    exit_code: int = 3

    def __init__(
        self,
        message: str = "Authentication failed",
        hint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, hint=hint)


class ConnectionError(KeeneticError):
    """No HTTP response could be obtained from the router.

    Covers DNS failures, refused and reset connections.
    """

    exit_code: int = 2

    def __init__(
        self,
        message: str = "Cannot connect to router",
        hint: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.reason = reason
        if hint is None:
            hint = "Is the router reachable? Check the host address and network connectivity."
        super().__init__(message=message, hint=hint)


class TimeoutError(KeeneticError):
    """The request or connect timeout elapsed."""

    exit_code: int = 2

    def __init__(
        self,
        message: str = "Request timed out",
        hint: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.timeout = timeout
        super().__init__(message=message, hint=hint)


class NotFoundError(KeeneticError):
    """The router answered 404, or a looked-up item does not exist."""

    exit_code: int = 4

    def __init__(
        self,
        message: str = "Resource not found",
        path: Optional[str] = None,
    ) -> None:
        self.path = path
        super().__init__(message=message)


class ApiError(KeeneticError):
    """Any other non-success response from the router.

    Attributes:
        status_code: HTTP status code of the response.
        response_body: Raw response body, unmodified.
    """

    exit_code: int = 4

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message=message)
