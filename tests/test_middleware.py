import pytest
from fastapi import Request, Response

from vanpool.auth import state as state_mod
from vanpool.auth.session import CookieStore, Session
from vanpool.auth.tokens import TokenVerifier
from vanpool.errors import SessionContextMissing, SessionStoreError, StateError
from vanpool.handlers import handle_user, set_session
from vanpool.middleware import SessionContext, get_session_context, prepare_session
from vanpool.model import Rider


def _session(**values) -> Session:
    return Session(name="vanpool_user", values=dict(values))


def test_new_session_gets_state_flag_and_empty_rider():
    s = _session()
    ctx = prepare_session(s)
    assert isinstance(ctx.state, str) and ctx.state
    assert ctx.authenticated is False
    assert ctx.rider == Rider()
    assert s["state"] == ctx.state
    assert s["authenticated"] is False
    assert s["self"] is ctx.rider


@pytest.mark.parametrize("flag", [False, True, None, "yes"])
def test_stored_rider_always_authenticates(flag):
    values = {"state": "st", "self": Rider(id="r1")}
    if flag is not None:
        values["authenticated"] = flag
    ctx = prepare_session(_session(**values))
    assert ctx.authenticated is True
    assert ctx.rider == Rider(id="r1")


def test_empty_rider_is_not_authenticated():
    ctx = prepare_session(_session(state="st", authenticated=True, self=Rider()))
    assert ctx.authenticated is False


@pytest.mark.parametrize("bad", [None, {"id": "r1"}, "r1", 7])
def test_wrong_typed_self_is_replaced(bad):
    ctx = prepare_session(_session(state="st", authenticated=True, self=bad))
    assert ctx.rider == Rider()
    assert ctx.authenticated is False


def test_wrong_typed_state_is_regenerated():
    ctx = prepare_session(_session(state=123))
    assert isinstance(ctx.state, str) and ctx.state


@pytest.mark.parametrize("values", [{}, {"self": Rider(id="r1", name="Ada")}, {"authenticated": "no"}])
def test_running_twice_is_idempotent(values):
    s = _session(**values)
    first = prepare_session(s)
    second = prepare_session(s)
    assert first == second


def test_existing_state_is_kept():
    assert prepare_session(_session(state="keep-me")).state == "keep-me"


def test_state_failure_propagates(monkeypatch):
    def boom(nbytes=None):
        raise OSError("no entropy")

    monkeypatch.setattr(state_mod.secrets, "token_urlsafe", boom)
    with pytest.raises(StateError):
        prepare_session(_session())


def test_context_is_read_only():
    ctx = SessionContext(rider=Rider(), authenticated=False, state="s")
    with pytest.raises(AttributeError):
        ctx.authenticated = True


def test_handlers_require_the_middleware():
    request = Request({"type": "http", "method": "GET", "path": "/user", "headers": []})
    with pytest.raises(SessionContextMissing):
        get_session_context(request)
    with pytest.raises(SessionContextMissing):
        handle_user(request)


def test_failed_save_restores_session_values(make_token, settings):
    class FailingStore(CookieStore):
        def save(self, session, response):
            raise SessionStoreError("write failed", code="session_save_failed")

    s = _session(state="st", authenticated=False, self=Rider())
    request = Request({"type": "http", "method": "POST", "path": "/session", "headers": []})
    request.state.session = s
    with pytest.raises(SessionStoreError):
        set_session(make_token(), request, Response(), store=FailingStore(settings),
                    verifier=TokenVerifier.from_settings(settings))
    assert s.values == {"state": "st", "authenticated": False, "self": Rider()}
    assert not s.saved
