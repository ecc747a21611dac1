# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import secrets

from vanpool.auth.session import STATE_KEY, Session
from vanpool.errors import StateError

logger = logging.getLogger(__name__)

STATE_BYTES = 32


def new_state() -> str:
    """Random URL-safe token (256 bits of entropy)."""
    return secrets.token_urlsafe(STATE_BYTES)


def get_state(session: Session) -> str:
    """Return the session's state token, creating and storing one if missing."""
    state = session.get(STATE_KEY)
    if isinstance(state, str) and state:
        return state
    try:
        state = new_state()
    except (OSError, NotImplementedError) as e:
        raise StateError(f"Failed to generate state: {e}") from e
    session[STATE_KEY] = state
    logger.debug("generated new state for session %s", session.name)
    return state
