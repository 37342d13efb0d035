"""
User management page.

Admins list accounts, add accounts through the registration endpoint and
delete accounts other than their own.
"""

from typing import Optional, Tuple

from pydantic import ValidationError

from models import RegisterRequest, Role, User
from services.exceptions import InvalidInputError
from utils.decorators import require_role, single_flight, view_action
from utils.logging import setup_logger
from utils.messages import translate

from .base import BaseHandler

logger = setup_logger(__name__)


class UserManagementHandler(BaseHandler):
    def __init__(self, session, client, confirm=None):
        super().__init__(session, client, confirm)
        self.users: Tuple[User, ...] = ()

    def _is_own_account(self, user_id: str) -> bool:
        """Whether ``user_id`` belongs to the logged-in username."""
        target = next((u for u in self.users if u.id == user_id), None)
        return target is not None and target.username == self.session.username

    @view_action()
    @require_role(Role.ADMIN)
    def load(self) -> None:
        self.users = self.gateway.fetch_users()

    @view_action(success="user_added")
    @single_flight
    @require_role(Role.ADMIN)
    def add_user(self, username: str, email: str, password: str, role: Optional[str] = None) -> None:
        """
        Create an account on behalf of the admin.

        Args:
            username: Display name, required
            email: Login email, required
            password: Initial password, required
            role: ``user`` (default) or ``admin``
        """
        if not username or not email or not password:
            raise InvalidInputError(translate("user_fields_required"))
        try:
            request = RegisterRequest(
                username=username, email=email, password=password, role=role
            )
        except ValidationError as e:
            raise InvalidInputError(translate("user_fields_required")) from e

        self.client.register(request, auth=True)
        logger.info("User added", extra={"username": request.username})
        with self.refreshing():
            self.users = self.gateway.fetch_users()

    @view_action(success="user_deleted")
    @require_role(Role.ADMIN)
    def delete_user(self, user_id: str) -> None:
        """Delete another account; deleting the logged-in account is refused before any request."""
        if not user_id:
            raise InvalidInputError(translate("user_id_invalid"))
        if user_id == self.session.user_id or self._is_own_account(user_id):
            raise InvalidInputError(translate("cannot_delete_self"))

        self.require_confirmation("confirm_delete_user")
        self.client.delete_user(user_id)
        logger.info("User deleted", extra={"user_id": user_id})
        with self.refreshing():
            self.users = self.gateway.fetch_users()
