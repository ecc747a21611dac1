import copy
import sys
import time
import uuid
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import jwt
import pytest
from fastapi.testclient import TestClient

from vanpool.app import create_app
from vanpool.auth.session import CookieStore, Session, SessionStore
from vanpool.config import Settings

JWT_KEY = "jwt-test-key-0123456789abcdefghijklmnop"


class MemoryStore(SessionStore):
    """In-memory store: the cookie only carries a random id."""

    def __init__(self, cookie_name: str = "vanpool_user"):
        self.cookie_name = cookie_name
        self.records = {}
        self.saves = 0

    def get(self, request):
        sid = request.cookies.get(self.cookie_name, "")
        if sid not in self.records:
            return Session(name=self.cookie_name)
        return Session(name=self.cookie_name, values=copy.deepcopy(self.records[sid]))

    def save(self, session, response):
        sid = session.get("_id") or uuid.uuid4().hex
        session.values["_id"] = sid
        self.records[sid] = copy.deepcopy(session.values)
        self.saves += 1
        response.set_cookie(self.cookie_name, sid)
        session.saved = True


@pytest.fixture()
def settings() -> Settings:
    return Settings(cookie_key="secret123", jwt_verify_key=JWT_KEY)


@pytest.fixture()
def store(settings) -> CookieStore:
    return CookieStore(settings)


@pytest.fixture()
def client(settings) -> TestClient:
    return TestClient(create_app(settings))


@pytest.fixture()
def make_token():
    def _make(claims=None, *, key: str = JWT_KEY, expires_in: int = 300) -> str:
        payload = {"sub": "rider-1", "name": "Ada Lovelace", "email": "ada@example.com"}
        payload.update(claims or {})
        payload.setdefault("exp", int(time.time()) + expires_in)
        return jwt.encode(payload, key, algorithm="HS256")

    return _make


@pytest.fixture()
def clean_env(monkeypatch):
    for var in (
        "COOKIE_KEY",
        "VANPOOL_INSECURE_DEV",
        "VANPOOL_COOKIE_NAME",
        "VANPOOL_SESSION_MAX_AGE",
        "VANPOOL_SESSION_SALT",
        "VANPOOL_COOKIE_SECURE",
        "JWT_VERIFY_KEY",
        "JWT_ALGORITHMS",
        "JWT_AUDIENCE",
        "JWT_ISSUER",
    ):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
