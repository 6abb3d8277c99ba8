"""
Error taxonomy for the company auth flows.

Validation, signature and freshness failures carry specific, user-actionable
messages. Upstream and persistence failures are collapsed to generic messages,
except the terminal-vs-transient distinction on refresh: a terminal failure
tells the client to reinstall, a transient one to retry.

All classes derive from common.exceptions.APIError and are rendered by the app
factory's APIError handler as ``{"error": <reason>, "message": <text>}``.
"""

from common.exceptions import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_500_INTERNAL_SERVER_ERROR,
    APIError,
)

REINSTALL_MESSAGE = "Session cannot be refreshed. Please reinstall the app."


class AuthFlowError(APIError):
    """Base class for callback and refresh failures."""

    default_message = "Internal server error"
    default_status = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str | None = None,
        internal_error: Exception | None = None,
        **extra,
    ) -> None:
        super().__init__(
            message or self.default_message,
            status_code=self.default_status,
            internal_error=internal_error,
            extra=extra or None,
        )


class ValidationError(AuthFlowError):
    default_message = "Missing required parameters"
    default_status = HTTP_400_BAD_REQUEST


class SignatureError(AuthFlowError):
    default_message = "Invalid signature"
    default_status = HTTP_401_UNAUTHORIZED


class ExpiredRequestError(AuthFlowError):
    default_message = "Request expired"
    default_status = HTTP_401_UNAUTHORIZED


class UnauthenticatedError(AuthFlowError):
    default_message = "Not authenticated"
    default_status = HTTP_401_UNAUTHORIZED


class ReinstallRequiredError(AuthFlowError):
    """The tenant can only recover by going through the install handshake again."""

    default_message = REINSTALL_MESSAGE
    default_status = HTTP_401_UNAUTHORIZED


class UpstreamAuthError(ReinstallRequiredError):
    """The provider revoked or no longer accepts the stored refresh token."""


class UpstreamTransientError(AuthFlowError):
    """The provider failed in a way the client may retry."""

    default_message = "Failed to refresh session. Please try again."


class PersistenceError(AuthFlowError):
    default_message = "Failed to save company data. Please try again."


class InternalError(AuthFlowError):
    pass
