"""
Shared state and wiring for page handlers.

Each handler owns the state of one page: the fetched lists, a loading flag,
and the error and success messages shown to the user. Lists are only ever
replaced as a whole, after a successful fetch.
"""

import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

from services.api_client import ShopAPIClient
from services.exceptions import ConfirmationDeclined, RefreshError, ShopClientError
from services.gateway import RefreshGateway
from services.session import Session
from utils.logging import setup_logger
from utils.messages import translate

# Success messages dismiss themselves after this many seconds
SUCCESS_TTL_SECS = 3.0

logger = setup_logger(__name__)


def decline_all(message: str) -> bool:
    """Confirmation callback used when none is supplied: nothing destructive runs."""
    return False


class ViewState:
    """Loading flag and user-facing messages of one page."""

    def __init__(self, success_ttl: float = SUCCESS_TTL_SECS):
        self.error = ""
        self.forbidden = False
        self.success_ttl = success_ttl
        self._success = ""
        self._success_at = 0.0
        self._pending = 0
        self._lock = threading.Lock()

    @property
    def loading(self) -> bool:
        return self._pending > 0

    @contextmanager
    def track(self, enabled: bool = True):
        """Hold the loading flag for the duration of the block, on every exit path."""
        if not enabled:
            yield
            return
        with self._lock:
            self._pending += 1
        try:
            yield
        finally:
            with self._lock:
                self._pending -= 1

    @property
    def success(self) -> str:
        if self._success and time.monotonic() - self._success_at > self.success_ttl:
            self._success = ""
        return self._success

    def succeed(self, message: str) -> None:
        self._success = message
        self._success_at = time.monotonic()

    def fail(self, message: str) -> None:
        self.error = message

    def deny(self, message: str) -> None:
        self.error = message
        self.forbidden = True

    def clear(self) -> None:
        self.error = ""
        self.forbidden = False
        self._success = ""

    dismiss = clear


class BaseHandler:
    """
    Base class for page handlers.

    Args:
        session: The logged-in session, or None
        client: API client wired to the session's token
        confirm: Callback asked before destructive actions; returns True to proceed
    """

    def __init__(
        self,
        session: Optional[Session],
        client: ShopAPIClient,
        confirm: Optional[Callable[[str], bool]] = None,
    ):
        self.session = session
        self.client = client
        self.confirm = confirm or decline_all
        self.state = ViewState()
        self.gateway = RefreshGateway(client, self.state)
        self.in_flight = set()

    def is_busy(self, action: str) -> bool:
        """Whether the control triggering ``action`` should be disabled."""
        return action in self.in_flight

    def require_confirmation(self, key: str, **kwargs) -> None:
        """Ask the confirmation callback; raises ConfirmationDeclined when the user says no."""
        if not self.confirm(translate(key, **kwargs)):
            raise ConfirmationDeclined(key)

    @contextmanager
    def refreshing(self):
        """
        Wrap the re-fetch that follows a saved mutation.

        The mutation already succeeded, so a failed re-fetch surfaces as
        RefreshError ("saved, please reload") rather than as a failed action.
        """
        try:
            yield
        except ShopClientError as e:
            logger.warning(
                "Re-fetch after mutation failed",
                extra={"handler": type(self).__name__, "error_message": e.message},
            )
            raise RefreshError() from e
