# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Body, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from vanpool.auth.session import CookieStore, SessionStore
from vanpool.auth.tokens import TokenVerifier
from vanpool.config import Settings, load_settings
from vanpool.errors import VanpoolError, error_response
from vanpool.handlers import handle_user, set_session
from vanpool.middleware import get_session_context, session_middleware

logger = logging.getLogger(__name__)


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    scheme, _, value = auth.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return value.strip()


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[SessionStore] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """Build the application. ``store`` and ``verifier`` default to the ones ``settings`` describe."""
    settings = settings or load_settings()
    store = store or CookieStore(settings)
    verifier = verifier or TokenVerifier.from_settings(settings)
    if not verifier.is_configured:
        logger.warning("JWT_VERIFY_KEY is not set: every token presented to /session will be rejected")

    app = FastAPI(title="vanpool")

    app.middleware("http")(session_middleware(store))

    @app.exception_handler(VanpoolError)
    async def _vanpool_error(request: Request, exc: VanpoolError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc)

    @app.post("/session")
    def post_session(request: Request, response: Response, token: str = Body("", embed=True)):
        tok = (token or "").strip() or _bearer_token(request)
        rider = set_session(tok, request, response, store=store, verifier=verifier)
        return {"authenticated": True, "self": rider.to_dict()}

    @app.get("/user")
    def get_user(request: Request):
        return handle_user(request)

    @app.get("/state")
    def get_state(request: Request):
        return {"state": get_session_context(request).state}

    return app
