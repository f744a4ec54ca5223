"""User-facing error taxonomy for chatflow predictions.

Every failure inside the prediction pipeline surfaces as exactly one
``ApiError``. ``classify_error`` turns whatever the transport raised into one
of these; errors that are already classified pass through untouched so they
are never wrapped twice.
"""

from enum import Enum
from typing import Optional


class ApiErrorKind(Enum):
    INVALID_ENDPOINT = "invalid_endpoint"
    AUTHENTICATION_FAILED = "authentication_failed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    CONNECTION_REFUSED = "connection_refused"
    UNREACHABLE = "unreachable"
    MALFORMED_RESPONSE = "malformed_response"
    UPSTREAM_ERROR = "upstream_error"


class ApiError(Exception):
    """Base class for errors rendered verbatim to the end user."""

    kind: ApiErrorKind
    default_message: str = "Flowise request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidEndpointError(ApiError):
    kind = ApiErrorKind.INVALID_ENDPOINT
    default_message = "Invalid API endpoint. URL must start with http:// or https://"


class AuthenticationFailedError(ApiError):
    kind = ApiErrorKind.AUTHENTICATION_FAILED
    default_message = "Invalid API key. Please check your authentication settings."


class ForbiddenError(ApiError):
    kind = ApiErrorKind.FORBIDDEN
    default_message = "Access forbidden. Please check your API permissions."


class NotFoundError(ApiError):
    kind = ApiErrorKind.NOT_FOUND
    default_message = "Chatflow not found. Please check your chatflow ID."


class RateLimitedError(ApiError):
    kind = ApiErrorKind.RATE_LIMITED
    default_message = "Rate limit exceeded. Please try again later."


class ServerError(ApiError):
    """Any non-2xx status without a dedicated kind."""

    kind = ApiErrorKind.SERVER_ERROR

    def __init__(self, status_code: int, upstream_message: str):
        self.status_code = status_code
        self.upstream_message = upstream_message
        super().__init__(f"Flowise API error ({status_code}): {upstream_message}")


class ConnectionRefusedApiError(ApiError):
    kind = ApiErrorKind.CONNECTION_REFUSED
    default_message = (
        "Could not connect to Flowise server. "
        "Please check if the server is running and accessible."
    )


class UnreachableError(ApiError):
    kind = ApiErrorKind.UNREACHABLE

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(f"Failed to connect to Flowise API: {reason or 'Unknown error'}")


class MalformedResponseError(ApiError):
    kind = ApiErrorKind.MALFORMED_RESPONSE
    default_message = "Invalid response from Flowise API"


class UpstreamError(ApiError):
    """The chatflow answered 2xx but reported an error in the body."""

    kind = ApiErrorKind.UPSTREAM_ERROR

    def __init__(self, upstream_message: str):
        self.upstream_message = upstream_message
        super().__init__(f"Flowise Error: {upstream_message}")


STATUS_ERRORS = {
    401: AuthenticationFailedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: RateLimitedError,
}


def classify_error(exc: BaseException) -> ApiError:
    """
    Map a raised condition onto the user-facing taxonomy.

    - ``ApiError`` instances are returned as-is.
    - Anything carrying a numeric ``status_code`` (``TransportError``) is
      mapped by status.
    - Everything else is a connection-level failure, classified by message.
    """
    if isinstance(exc, ApiError):
        return exc

    status_code = getattr(exc, "status_code", None)
    message = getattr(exc, "message", None)
    if message is None:
        message = str(exc)

    if status_code:
        error_cls = STATUS_ERRORS.get(status_code)
        if error_cls is not None:
            return error_cls()
        return ServerError(status_code, message)

    if message and "ECONNREFUSED" in message:
        return ConnectionRefusedApiError()
    return UnreachableError(message or None)
