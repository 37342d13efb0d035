import pytest

from authorizer import ROUTES, authorize_route, open_route
from conftest import BASE_URL
from handlers import DebtManagementHandler, ProductListHandler
from services.api_client import ShopAPIClient
from services.session import SessionManager
from services.token_store import MemoryTokenStore


@pytest.mark.parametrize("path", ["/", "/login", "/register"])
def test_public_routes_are_always_allowed(path):
    assert authorize_route(None, path).allowed


@pytest.mark.parametrize("path", ["/products", "/categories", "/transactions", "/debts", "/debt-list", "/users"])
def test_guarded_routes_redirect_to_login_without_session(path):
    decision = authorize_route(None, path)

    assert not decision.allowed
    assert decision.redirect == "/login"


@pytest.mark.parametrize("path", ["/debts", "/debt-list", "/users"])
def test_admin_routes_deny_regular_users(user_session, path):
    decision = authorize_route(user_session, path)

    assert not decision.allowed
    assert decision.redirect == "/login"


@pytest.mark.parametrize("path", ["/products", "/categories", "/transactions"])
def test_regular_users_open_shared_pages(user_session, path):
    assert authorize_route(user_session, path).allowed


def test_admin_opens_every_route(admin_session):
    for path in ROUTES:
        assert authorize_route(admin_session, path).allowed


def test_inactive_session_is_treated_as_logged_out(admin_session):
    admin_session.invalidate()

    assert authorize_route(admin_session, "/debts").redirect == "/login"


def test_paths_are_normalized_and_unknown_paths_go_home(admin_session):
    assert authorize_route(admin_session, "debts/").allowed
    assert authorize_route(admin_session, "/products?page=2").allowed

    decision = authorize_route(admin_session, "/reports")
    assert not decision.allowed
    assert decision.redirect == "/"


def test_open_route_builds_handler_for_session(http, admin_session):
    sessions = SessionManager(ShopAPIClient(base_url=BASE_URL, http=http), MemoryTokenStore())
    sessions.session = admin_session

    decision, handler = open_route(sessions, "/debts")

    assert decision.allowed
    assert isinstance(handler, DebtManagementHandler)
    assert handler.session is admin_session

    _, products = open_route(sessions, "/products")
    assert isinstance(products, ProductListHandler)


def test_logout_route_ends_session(http, admin_session):
    store = MemoryTokenStore({"token": admin_session.token})
    sessions = SessionManager(ShopAPIClient(base_url=BASE_URL, http=http), store)
    sessions.session = admin_session

    decision, handler = open_route(sessions, "/logout")

    assert handler is None
    assert decision.redirect == "/"
    assert sessions.session is None
    assert not admin_session.active
    assert store.get() is None
    assert authorize_route(sessions.session, "/products").redirect == "/login"
