"""
Bearer token utilities.

The backend issues and verifies the JWT; the client only reads the claims it
needs (user id, role, expiry) and never verifies the signature itself.
"""

import time
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import DecodeError, InvalidTokenError


def bearer_header(token: str) -> Dict[str, str]:
    """Build the Authorization header for a token."""
    return {"Authorization": f"Bearer {token}"}


def decode_token_claims(token: str) -> Dict[str, Any]:
    """
    Read the claims of a token without verifying its signature.

    Args:
        token: JWT issued by the backend

    Returns:
        Dictionary of claims, empty when the token is not a readable JWT
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "RS256"],
        )
    except (DecodeError, InvalidTokenError):
        return {}


def token_expired(claims: Dict[str, Any], leeway: int = 0) -> bool:
    """
    Check the ``exp`` claim.

    Tokens without an expiry are treated as valid; the backend will reject
    them if they are not.
    """
    exp = claims.get("exp")
    if exp is None:
        return False
    try:
        return float(exp) + leeway < time.time()
    except (TypeError, ValueError):
        return True


def mask_token(token: Optional[str]) -> str:
    """Shorten a token for log output."""
    if not token:
        return ""
    return token[:6] + "..." if len(token) > 6 else "***"
