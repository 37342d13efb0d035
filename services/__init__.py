"""
Services package for the backend integration and client-side business logic.

This package contains the HTTP client, the session lifecycle, the read
gateway, the debt ledger, the cart and the pure aggregation functions.
Modules are imported directly (``from services.ledger import DebtLedger``).
"""

from .exceptions import (ActionInProgress, APIError, AuthorizationError,
                         ConfirmationDeclined, InvalidInputError, NetworkError,
                         NotFoundError, RefreshError, ShopClientError)

__all__ = [
    "ShopClientError",
    "InvalidInputError",
    "APIError",
    "NotFoundError",
    "NetworkError",
    "AuthorizationError",
    "RefreshError",
    "ConfirmationDeclined",
    "ActionInProgress",
]
