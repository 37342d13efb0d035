"""
HTTP payload helpers shared by the API client.

This module provides consistent JSON encoding of request bodies, unwrapping
of the backend's ``{"data": ...}`` envelopes and extraction of the error
message a failed response carries.
"""

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class HTTPStatus(Enum):
    """HTTP status codes the client reacts to."""

    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500


AUTH_FAILURE_STATUSES = {HTTPStatus.UNAUTHORIZED.value, HTTPStatus.FORBIDDEN.value}

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class APIJSONEncoder(json.JSONEncoder):
    """
    Custom JSON encoder for request bodies that handles:
    - Decimal amounts (sent as JSON numbers, as the backend expects)
    - datetime and date objects
    - Enums and pydantic models
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "model_dump"):  # Pydantic models
            return obj.model_dump(by_alias=True, exclude_none=True)
        return super().default(obj)


def encode_body(body: Any) -> str:
    """
    Serialize a request body.

    Args:
        body: Dictionary, list or pydantic model

    Returns:
        JSON document as a string
    """
    if hasattr(body, "model_dump"):
        body = body.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(body, cls=APIJSONEncoder)


def unwrap_data(payload: Any) -> Any:
    """
    Return the content of a ``{"data": ...}`` envelope.

    Endpoints that answer with a bare object or list are returned unchanged.
    """
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def error_message_from(response: Any, default: str) -> str:
    """
    Extract the error message supplied by the server.

    Args:
        response: requests.Response of a failed call
        default: Localized message used when the server supplied none

    Returns:
        The server's ``error`` (or ``message``) field, else ``default``
    """
    try:
        body: Optional[Dict[str, Any]] = response.json()
    except ValueError:
        return default

    if isinstance(body, dict):
        for key in ("error", "message"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return default
