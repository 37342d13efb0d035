import json
import time
from typing import Any, Dict, List, NamedTuple, Optional

import jwt
import pytest

from models import Role
from services.api_client import ShopAPIClient
from services.session import Session
from utils.messages import set_locale

BASE_URL = "http://api.test"


def make_token(user_id: str = "u-admin", role: str = "admin", expires_in: int = 3600) -> str:
    claims = {"userId": user_id, "role": role, "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, "test-secret", algorithm="HS256")


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, raw: Optional[bytes] = None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode()

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        return json.loads(self.content)


class Call(NamedTuple):
    method: str
    path: str
    params: Optional[Dict[str, Any]]
    body: Any
    headers: Dict[str, str]
    timeout: Any


class FakeHTTP:
    """Stands in for requests.Session and answers by (method, path)."""

    def __init__(self):
        self.routes: Dict[tuple, List[Any]] = {}
        self.calls: List[Call] = []

    def on(self, method: str, path: str, *answers: Any) -> "FakeHTTP":
        """
        Queue answers for a route; the last one repeats.

        An answer is a FakeResponse, an exception instance to raise, a
        callable returning either, or a JSON-able body returned with status 200.
        """
        self.routes[(method, path)] = [
            a if isinstance(a, (FakeResponse, Exception)) or callable(a) else FakeResponse(200, a)
            for a in answers
        ]
        return self

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        assert url.startswith(BASE_URL)
        path = url[len(BASE_URL):]
        self.calls.append(
            Call(method, path, params, json.loads(data) if data else None, headers or {}, timeout)
        )
        answers = self.routes.get((method, path))
        if not answers:
            return FakeResponse(404, {"error": f"No route for {method} {path}"})
        answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if callable(answer):
            answer = answer()
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_to(self, method: str, path: Optional[str] = None) -> List[Call]:
        return [c for c in self.calls if c.method == method and (path is None or c.path == path)]

    @property
    def mutations(self) -> List[Call]:
        return [c for c in self.calls if c.method != "GET"]


@pytest.fixture(autouse=True)
def english_messages():
    set_locale("en")
    yield
    set_locale("en")


@pytest.fixture
def http() -> FakeHTTP:
    return FakeHTTP()


@pytest.fixture
def admin_session() -> Session:
    return Session(
        token=make_token("u-admin", "admin"),
        username="admin",
        email="admin@shopmail.com",
        role=Role.ADMIN,
        user_id="u-admin",
    )


@pytest.fixture
def user_session() -> Session:
    return Session(
        token=make_token("u-alice", "user"),
        username="alice",
        email="alice@shopmail.com",
        role=Role.USER,
        user_id="u-alice",
    )


@pytest.fixture
def client(http, admin_session) -> ShopAPIClient:
    return ShopAPIClient(
        base_url=BASE_URL,
        timeout=5,
        http=http,
        token_provider=lambda: admin_session.token,
    )


@pytest.fixture
def confirm_yes():
    asked = []

    def confirm(message: str) -> bool:
        asked.append(message)
        return True

    confirm.asked = asked
    return confirm


@pytest.fixture
def confirm_no():
    asked = []

    def confirm(message: str) -> bool:
        asked.append(message)
        return False

    confirm.asked = asked
    return confirm
