# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import Request, Response

from vanpool.auth.session import AUTHENTICATED_KEY, SELF_KEY, Session, SessionStore
from vanpool.auth.tokens import TokenVerifier, rider_from_claims
from vanpool.errors import SerializationError, SessionStoreError
from vanpool.middleware import get_session_context
from vanpool.model import Rider

logger = logging.getLogger(__name__)


def set_session(
    token: str,
    request: Request,
    response: Response,
    *,
    store: SessionStore,
    verifier: TokenVerifier,
) -> Rider:
    """Verify ``token`` and store the Rider it describes in the session.

    Raises AuthenticationError for a bad token, leaving the session untouched,
    and SessionStoreError when the session can't be loaded or saved. A failed
    save leaves the session as it was.
    """
    session: Optional[Session] = getattr(request.state, "session", None)
    if not isinstance(session, Session):
        session = store.get(request)

    claims = verifier.verify(token)
    rider = rider_from_claims(claims)

    previous = dict(session.values)
    session[SELF_KEY] = rider
    session[AUTHENTICATED_KEY] = True
    try:
        store.save(session, response)
    except SessionStoreError:
        session.values = previous
        raise
    logger.info("session %s now belongs to rider %s", session.name, rider.id)
    return rider


def render_rider(rider: Rider) -> bytes:
    try:
        return json.dumps(rider.to_dict()).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to serialise rider: {e}") from e


def handle_user(request: Request) -> Response:
    """Respond with the current session's Rider as JSON."""
    ctx = get_session_context(request)
    body = render_rider(ctx.rider)
    logger.debug("responding with session user (authenticated=%s)", ctx.authenticated)
    return Response(content=body, media_type="application/json")
