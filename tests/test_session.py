import pytest

from conftest import BASE_URL, FakeResponse, make_token
from factories import user_record
from services.api_client import ShopAPIClient
from services.exceptions import AuthorizationError, InvalidInputError
from services.session import SessionManager
from services.token_store import FileTokenStore, MemoryTokenStore


@pytest.fixture
def manager(http):
    client = ShopAPIClient(base_url=BASE_URL, timeout=5, http=http)
    return SessionManager(client, MemoryTokenStore())


def test_login_stores_token_and_builds_session(manager, http):
    token = make_token("u-bob", "user")
    http.on("POST", "/api/auth/login", {"token": token, "role": "user", "username": "bob"})

    session = manager.login("bob@shopmail.com", "secret")

    assert session.username == "bob"
    assert session.user_id == "u-bob"
    assert not session.is_admin
    assert manager.store.get() == token
    assert manager.current_token() == token


@pytest.mark.parametrize("email, password", [("", "secret"), ("bob@shopmail.com", ""), ("not-an-email", "x")])
def test_login_requires_credentials(manager, http, email, password):
    with pytest.raises(InvalidInputError):
        manager.login(email, password)
    assert http.calls == []


def test_failed_login_keeps_no_session(manager, http):
    http.on("POST", "/api/auth/login", FakeResponse(401, {"error": "Invalid credentials"}))

    with pytest.raises(AuthorizationError, match="Invalid credentials"):
        manager.login("bob@shopmail.com", "wrong")

    assert manager.session is None
    assert manager.store.get() is None


def test_logout_invalidates_session_and_token(manager, http):
    http.on("POST", "/api/auth/login", {"token": make_token(), "role": "admin", "username": "admin"})
    session = manager.login("admin@shopmail.com", "secret")

    manager.logout()

    assert not session.active
    assert manager.session is None
    assert manager.store.get() is None
    assert manager.current_token() is None


def test_restore_uses_profile_endpoint(manager, http):
    token = make_token("u-admin", "admin")
    manager.store.set(token)
    http.on("GET", "/api/auth/me", user_record("u-admin", "admin", role="admin"))

    session = manager.restore()

    assert session.username == "admin"
    assert session.is_admin
    assert http.calls[0].headers["Authorization"] == f"Bearer {token}"


def test_restore_drops_rejected_token(manager, http):
    manager.store.set(make_token())
    http.on("GET", "/api/auth/me", FakeResponse(401, {}))

    assert manager.restore() is None
    assert manager.store.get() is None


def test_restore_drops_expired_token_without_request(manager, http):
    manager.store.set(make_token(expires_in=-60))

    assert manager.restore() is None
    assert http.calls == []
    assert manager.store.get() is None


def test_restore_without_token(manager, http):
    assert manager.restore() is None
    assert http.calls == []


def test_register_validates_before_sending(manager, http):
    with pytest.raises(InvalidInputError):
        manager.register("  ", "bob@shopmail.com", "pw")
    assert http.calls == []

    http.on("POST", "/api/auth/register", FakeResponse(201, {"message": "ok"}))
    assert manager.register("bob", "bob@shopmail.com", "pw")
    assert "Authorization" not in http.calls[0].headers


def test_file_token_store_round_trip(tmp_path):
    path = tmp_path / "state" / "storage.json"
    store = FileTokenStore(path)

    store.set("abc")

    assert FileTokenStore(path).get() == "abc"
    store.delete()
    assert FileTokenStore(path).get() is None
