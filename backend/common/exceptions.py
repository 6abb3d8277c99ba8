"""
Standardized error handling for API responses.

This module provides the error handling primitives shared by backend services. It
keeps user-facing messages separate from internal error details so that upstream
failures, database errors and stack traces are logged but never returned to an
API client.

Key Features:
    - APIError base class carrying a safe message and an HTTP status code
    - Consistent JSON error body: {"error": <reason phrase>, "message": <text>}
    - Automatic logging of the wrapped internal error
    - create_api_error() for wrapping unexpected failures with generic messages

Architecture:
    The module uses a two-tier error handling approach:
    1. Internal errors are logged with full details for debugging
    2. User-facing errors contain only safe, generic messages

Example:
    ```python
    from common.exceptions import APIError, create_api_error

    if not signature_ok:
        raise APIError("Invalid signature", status_code=401)

    try:
        await handler(event)
    except Exception as e:
        raise create_api_error("processing webhook", internal_error=e) from e
    ```
"""

from http import HTTPStatus
from typing import Any

from fastapi.responses import JSONResponse
from loguru import logger

# HTTP Status Code Constants
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_500_INTERNAL_SERVER_ERROR = 500

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request. Please try again later."


class APIError(Exception):
    """
    Base exception class for API errors with user-friendly messages.

    Attributes:
        message (str): User-friendly error message that can be safely exposed to clients.
        status_code (int): HTTP status code to return (default: 500).
        internal_error (Exception | None): The original exception that caused this error,
            stored for logging purposes but not exposed to clients.
        extra (dict[str, Any]): Additional safe fields merged into the response body.

    Example:
        ```python
        raise APIError(
            message="Missing required parameters",
            status_code=400,
            extra={"required": ["code", "company_id"]},
        )
        ```

    Note:
        - The message should never contain sensitive information
        - Internal errors are logged but not included in API responses
        - Rendered by the handler registered in common.fastapi.create_fastapi_app
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        internal_error: Exception | None = None,
        extra: dict[str, Any] | None = None,
        operation: str | None = None,
    ) -> None:
        """
        Initialize an APIError instance.

        Args:
            message: User-friendly error message safe to expose to API clients.
            status_code: HTTP status code to return. Defaults to 500.
            internal_error: Optional original exception that caused this error. This is
                logged for debugging but never exposed to clients.
            extra: Optional additional fields for the response body.
            operation: Optional description of the failed operation, used in logs.
        """
        self.message = message
        self.status_code = status_code
        self.internal_error = internal_error
        self.extra = extra or {}
        self.operation = operation
        super().__init__(self.message)

    @property
    def error(self) -> str:
        """HTTP reason phrase for the status code (e.g. "Unauthorized")."""
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return "Error"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message, **self.extra}


def api_error_response(exc: APIError) -> JSONResponse:
    """
    Render an APIError as a JSON response.

    Server-side errors (5xx) are logged with the wrapped internal error; client
    errors are logged at warning level without a stack trace.
    """
    context = f" in {exc.operation}" if exc.operation else ""
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        if exc.internal_error is not None:
            logger.opt(exception=exc.internal_error).error(
                f"{exc.__class__.__name__}{context}: {exc.message}"
            )
        else:
            logger.error(f"{exc.__class__.__name__}{context}: {exc.message}")
    else:
        logger.warning(f"{exc.__class__.__name__}{context} ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_api_error(
    operation: str,
    status_code: int = 500,
    internal_error: Exception | None = None,
    user_message: str | None = None,
) -> APIError:
    """
    Create a standardized API error with safe error messages.

    This function creates an APIError with a user-friendly error message. The
    internal error travels with it and is logged, with the operation name, when
    the error is rendered.

    Args:
        operation: Description of the operation that failed (e.g., "processing webhook").
            Recorded on the error for logging context.
        status_code: HTTP status code to return. Defaults to 500 (Internal Server Error).
        internal_error: Optional original exception that caused this error. The full
            exception (including stack trace) is logged but not included in the response.
        user_message: Optional custom user-friendly message. If None, a generic message
            is used.

    Returns:
        APIError configured with the appropriate status code and safe error message.

    Example:
        ```python
        try:
            await registry.dispatch(event)
        except Exception as e:
            raise create_api_error("processing webhook", internal_error=e) from e
        ```
    """
    return APIError(
        user_message or GENERIC_ERROR_MESSAGE,
        status_code=status_code,
        internal_error=internal_error,
        operation=operation,
    )
