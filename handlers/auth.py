"""
Login, registration and logout pages.

These handlers drive a ``SessionManager``; after a successful login the
handler's ``session`` is the new session, ready to be passed to other pages.
"""

from typing import Optional

from services.session import Session, SessionManager
from utils.decorators import view_action
from utils.logging import setup_logger

from .base import BaseHandler

logger = setup_logger(__name__)


class AuthHandler(BaseHandler):
    def __init__(self, sessions: SessionManager, confirm=None):
        super().__init__(sessions.session, sessions.client, confirm)
        self.sessions = sessions

    @view_action()
    def login(self, email: str, password: str) -> Optional[Session]:
        """Log in; on failure the error is shown and no session is kept."""
        self.session = self.sessions.login(email, password)
        return self.session

    @view_action()
    def register(self, username: str, email: str, password: str) -> bool:
        """Self-registration as a regular user; the user logs in afterwards."""
        return self.sessions.register(username, email, password)

    def restore(self) -> Optional[Session]:
        self.session = self.sessions.restore()
        return self.session

    def logout(self) -> None:
        self.sessions.logout()
        self.session = None
        self.state.clear()
