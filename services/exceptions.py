"""
Exceptions raised by the client services.

These exceptions are caught by the page handlers and turned into the
message shown to the user; none of them is fatal to the application.
"""

from typing import Any, Optional

from utils.messages import translate


class ShopClientError(Exception):
    """Base exception for all client errors."""

    default_key = "request_failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or translate(self.default_key)
        super().__init__(self.message)


class InvalidInputError(ShopClientError):
    """Raised when user input fails client-side validation; no request is sent."""

    default_key = "amount_invalid"


class APIError(ShopClientError):
    """Raised when the backend answers with an error status or an unusable body."""

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class NotFoundError(APIError):
    """Raised when the backend answers 404."""
    pass


class NetworkError(ShopClientError):
    """Raised when no response was received (connection failure or timeout)."""

    default_key = "network_error"


class AuthorizationError(ShopClientError):
    """Raised on 401/403 responses, a missing session or a role mismatch."""

    default_key = "not_permitted"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RefreshError(ShopClientError):
    """Raised when a mutation succeeded but the follow-up re-fetch failed."""

    default_key = "refresh_failed"


class ConfirmationDeclined(ShopClientError):
    """Raised when the user declines a confirmation step."""
    pass


class ActionInProgress(ShopClientError):
    """Raised when an action is triggered again while its request is in flight."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Action '{action}' is already in progress")
