# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import Request, Response

from vanpool.auth.session import AUTHENTICATED_KEY, SELF_KEY, STATE_KEY, Session, SessionStore
from vanpool.auth.state import get_state
from vanpool.errors import SessionContextMissing, SessionStoreError, StateError, error_response
from vanpool.model import Rider

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class SessionContext:
    """Read-only view of the session record for downstream handlers."""

    rider: Rider
    authenticated: bool
    state: str


def prepare_session(session: Session) -> SessionContext:
    """Make sure ``state``, ``authenticated`` and ``self`` exist with the right types.

    A stored Rider always wins: if one is present the session is authenticated,
    whatever the stored flag says. The empty placeholder Rider does not count.
    """
    if not isinstance(session.get(STATE_KEY), str) or not session.get(STATE_KEY):
        logger.debug("no state in session, adding it")
        get_state(session)

    if not isinstance(session.get(AUTHENTICATED_KEY), bool):
        logger.debug("authenticated flag missing, marking as not authenticated")
        session[AUTHENTICATED_KEY] = False

    rider = session.get(SELF_KEY)
    if not isinstance(rider, Rider) or rider.is_empty():
        logger.debug("no user in session")
        session[SELF_KEY] = rider if isinstance(rider, Rider) else Rider()
        session[AUTHENTICATED_KEY] = False
    else:
        logger.debug("found user %s in session, marking as authenticated", rider.id)
        session[AUTHENTICATED_KEY] = True

    return SessionContext(
        rider=session[SELF_KEY],
        authenticated=session[AUTHENTICATED_KEY],
        state=session[STATE_KEY],
    )


def session_middleware(store: SessionStore) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """Build the HTTP middleware that loads, completes and persists the session."""

    async def _session_middleware(request: Request, call_next: CallNext) -> Response:
        try:
            session = store.get(request)
        except SessionStoreError as e:
            logger.warning("rejecting request to %s: %s", request.url.path, e)
            return error_response(e)

        try:
            ctx = prepare_session(session)
        except StateError as e:
            logger.error("failed to get/create state: %s", e)
            return error_response(e)

        request.state.session = session
        request.state.session_context = ctx

        response = await call_next(request)

        # Handlers that changed the session may already have written the cookie.
        if not session.saved:
            try:
                store.save(session, response)
            except SessionStoreError as e:
                logger.error("failed to save session %s: %s", session.name, e)
                return error_response(e)
        return response

    return _session_middleware


def get_session_context(request: Request) -> SessionContext:
    ctx = getattr(request.state, "session_context", None)
    if not isinstance(ctx, SessionContext):
        raise SessionContextMissing("Session middleware did not run for this request")
    return ctx
