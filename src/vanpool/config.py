# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from vanpool.errors import ConfigurationError

logger = logging.getLogger(__name__)

COOKIE_KEY_ENV = "COOKIE_KEY"
INSECURE_COOKIE_KEY = "makemerandom"
DEFAULT_COOKIE_NAME = "vanpool_user"
DEFAULT_MAX_AGE_SECONDS = 30 * 24 * 3600


def _truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "y"}


def _optional(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    return v or None


@dataclass(frozen=True)
class Settings:
    cookie_key: str = field(repr=False)
    cookie_name: str = DEFAULT_COOKIE_NAME
    session_max_age: int = DEFAULT_MAX_AGE_SECONDS
    session_salt: str = "vanpool.session.v1"
    cookie_secure: bool = False
    jwt_verify_key: Optional[str] = field(default=None, repr=False)
    jwt_algorithms: Tuple[str, ...] = ("HS256",)
    jwt_audience: Optional[str] = None
    jwt_issuer: Optional[str] = None

    def cookie_settings(self) -> dict:
        return {
            "max_age": self.session_max_age,
            "path": "/",
            "httponly": True,
            "samesite": "lax",
            "secure": self.cookie_secure,
        }


def _cookie_key() -> str:
    key = os.getenv(COOKIE_KEY_ENV, "")
    if key:
        return key
    if not _truthy(os.getenv("VANPOOL_INSECURE_DEV")):
        raise ConfigurationError(f"Missing {COOKIE_KEY_ENV} in environment")
    logger.warning(
        "%s is not set; using the insecure development key. Never run like this in production.",
        COOKIE_KEY_ENV,
    )
    return INSECURE_COOKIE_KEY


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build settings from the environment (and ``.env`` when present)."""
    if dotenv:
        load_dotenv()

    try:
        max_age = int(os.getenv("VANPOOL_SESSION_MAX_AGE", str(DEFAULT_MAX_AGE_SECONDS)))
    except ValueError as e:
        raise ConfigurationError(f"VANPOOL_SESSION_MAX_AGE must be an integer: {e}") from e

    algorithms = tuple(
        a.strip() for a in os.getenv("JWT_ALGORITHMS", "HS256").split(",") if a.strip()
    )
    if not algorithms:
        raise ConfigurationError("JWT_ALGORITHMS must name at least one algorithm")

    return Settings(
        cookie_key=_cookie_key(),
        cookie_name=os.getenv("VANPOOL_COOKIE_NAME", DEFAULT_COOKIE_NAME),
        session_max_age=max_age,
        session_salt=os.getenv("VANPOOL_SESSION_SALT", "vanpool.session.v1"),
        cookie_secure=_truthy(os.getenv("VANPOOL_COOKIE_SECURE")),
        jwt_verify_key=_optional(os.getenv("JWT_VERIFY_KEY")),
        jwt_algorithms=algorithms,
        jwt_audience=_optional(os.getenv("JWT_AUDIENCE")),
        jwt_issuer=_optional(os.getenv("JWT_ISSUER")),
    )
