"""
Session lifecycle for the shop client.

A ``Session`` is created by ``SessionManager.login`` (or ``restore`` from a
stored token) and destroyed by ``logout``. Handlers receive the session
explicitly; nothing reads the current user from module-level state.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from models import LoginRequest, RegisterRequest, Role, User
from services.api_client import ShopAPIClient
from services.exceptions import InvalidInputError, ShopClientError
from services.token_store import TOKEN_KEY, MemoryTokenStore
from utils.logging import setup_logger
from utils.messages import translate
from utils.security import decode_token_claims, mask_token, token_expired

logger = setup_logger(__name__)


class Session(BaseModel):
    """An authenticated user and the bearer token that proves it."""

    model_config = ConfigDict(validate_assignment=True)

    token: str
    username: str
    email: Optional[str] = None
    role: Role = Role.USER
    user_id: Optional[str] = None
    claims: Dict[str, Any] = {}
    active: bool = True

    def has_role(self, *roles: str) -> bool:
        return self.active and self.role.value in {getattr(r, "value", r) for r in roles}

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    def invalidate(self) -> None:
        self.active = False


def _user_id_from_claims(claims: Dict[str, Any]) -> Optional[str]:
    for key in ("userId", "id", "_id", "sub"):
        value = claims.get(key)
        if value:
            return str(value)
    return None


class SessionManager:
    """
    Owns the credential store and the current session.

    The manager points ``client.token_provider`` at ``current_token``, so
    the client only ever sends the token of the live session.
    """

    def __init__(self, client: Optional[ShopAPIClient] = None, store=None):
        self.store = store if store is not None else MemoryTokenStore()
        self.session: Optional[Session] = None
        self.client = client or ShopAPIClient()
        self.client.token_provider = self.current_token

    def current_token(self) -> Optional[str]:
        if self.session is not None and self.session.active:
            return self.session.token
        return None

    def login(self, email: str, password: str) -> Session:
        """
        Authenticate and create the session.

        Raises:
            InvalidInputError: Email or password missing (no request is sent)
            ShopClientError: The backend rejected the credentials
        """
        if not email or not password:
            raise InvalidInputError(translate("login_fields_required"))
        try:
            request = LoginRequest(email=email.strip(), password=password)
        except PydanticValidationError as e:
            raise InvalidInputError(translate("login_fields_required")) from e

        response = self.client.login(request)
        self.store.set(response.token, TOKEN_KEY)

        claims = decode_token_claims(response.token)
        self.session = Session(
            token=response.token,
            username=response.username,
            email=request.email,
            role=response.role,
            user_id=_user_id_from_claims(claims),
            claims=claims,
        )
        logger.info(
            "Logged in",
            extra={
                "username": response.username,
                "role": response.role.value,
                "token": mask_token(response.token),
            },
        )
        return self.session

    def restore(self) -> Optional[Session]:
        """
        Re-create the session from the stored token.

        The stored token is discarded when it has expired or the backend no
        longer accepts it.
        """
        token = self.store.get(TOKEN_KEY)
        if not token:
            return None

        claims = decode_token_claims(token)
        if token_expired(claims):
            logger.info("Stored token has expired")
            self.logout()
            return None

        # Provisional session so the profile request carries the token
        self.session = Session(token=token, username="", claims=claims)
        try:
            user: User = self.client.me()
        except ShopClientError as e:
            logger.warning(f"Auth status check failed: {e.message}")
            self.logout()
            return None

        self.session = Session(
            token=token,
            username=user.username,
            email=user.email,
            role=user.role,
            user_id=user.id or _user_id_from_claims(claims),
            claims=claims,
        )
        return self.session

    def register(
        self,
        username: str,
        email: str,
        password: str,
        role: Optional[str] = None,
        as_admin: bool = False,
    ) -> bool:
        """
        Create an account.

        ``as_admin`` sends the request with the current session's token, the
        way the user management page adds users.
        """
        if not username or not email or not password:
            raise InvalidInputError(translate("user_fields_required"))
        try:
            request = RegisterRequest(
                username=username, email=email, password=password, role=role
            )
        except PydanticValidationError as e:
            raise InvalidInputError(translate("user_fields_required")) from e

        self.client.register(request, auth=as_admin)
        logger.info("Account registered", extra={"username": request.username})
        return True

    def logout(self) -> None:
        self.store.delete(TOKEN_KEY)
        if self.session is not None:
            self.session.invalidate()
            logger.info("Logged out", extra={"username": self.session.username})
        self.session = None
