"""
Route authorization for the shop client.

Maps every route to the roles that may open it and decides, for a session,
whether a route is shown or the user is redirected. Public routes are always
allowed; guarded routes need an active session and, for admin pages, the
admin role.
"""

from typing import Any, Dict, NamedTuple, Optional, Tuple

from handlers import (CategoryListHandler, DebtListHandler,
                      DebtManagementHandler, ProductListHandler,
                      TransactionListHandler, UserManagementHandler)
from models import Role
from services.session import Session, SessionManager
from utils.logging import setup_logger

logger = setup_logger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/"


class Route(NamedTuple):
    path: str
    roles: Optional[Tuple[Role, ...]]  # None: public; (): any logged-in user
    handler: Any = None


ROUTES: Dict[str, Route] = {
    route.path: route
    for route in (
        Route("/", None),
        Route("/login", None),
        Route("/register", None),
        Route("/logout", None),
        Route("/products", (), ProductListHandler),
        Route("/categories", (), CategoryListHandler),
        Route("/transactions", (), TransactionListHandler),
        Route("/debts", (Role.ADMIN,), DebtManagementHandler),
        Route("/debt-list", (Role.ADMIN,), DebtListHandler),
        Route("/users", (Role.ADMIN,), UserManagementHandler),
    )
}


class Decision(NamedTuple):
    allowed: bool
    redirect: Optional[str] = None
    route: Optional[Route] = None


def normalize_path(path: str) -> str:
    path = "/" + (path or "").strip().strip("/")
    return path.split("?", 1)[0]


def authorize_route(session: Optional[Session], path: str) -> Decision:
    """
    Decide whether ``session`` may open ``path``.

    Args:
        session: Current session, or None when logged out
        path: Route path, e.g. ``/debts``

    Returns:
        Decision with ``allowed`` set, or the path to redirect to: the
        login page for guarded routes, home for unknown routes
    """
    route = ROUTES.get(normalize_path(path))
    if route is None:
        logger.info("Unknown route", extra={"path": path})
        return Decision(False, HOME_PATH)

    if route.roles is None:
        return Decision(True, route=route)

    if session is None or not session.active:
        logger.info("Route requires login", extra={"path": route.path})
        return Decision(False, LOGIN_PATH, route)

    if route.roles and not session.has_role(*route.roles):
        logger.warning(
            "Route denied",
            extra={"path": route.path, "username": session.username, "role": session.role.value},
        )
        return Decision(False, LOGIN_PATH, route)

    return Decision(True, route=route)


def open_route(sessions: SessionManager, path: str, confirm=None):
    """
    Resolve a route to its page handler.

    ``/logout`` ends the session and redirects home.

    Returns:
        Tuple of (decision, handler); the handler is None when the route is
        denied or has no page handler
    """
    if normalize_path(path) == "/logout":
        sessions.logout()
        return Decision(False, HOME_PATH, ROUTES["/logout"]), None

    decision = authorize_route(sessions.session, path)
    if not decision.allowed or decision.route.handler is None:
        return decision, None
    return decision, decision.route.handler(sessions.session, sessions.client, confirm)
