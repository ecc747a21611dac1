# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import jwt

from vanpool.config import Settings
from vanpool.errors import AuthenticationError
from vanpool.model import Rider

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verifies bearer tokens. Without a key every token is rejected."""

    def __init__(
        self,
        key: Optional[str],
        *,
        algorithms: Sequence[str] = ("HS256",),
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
    ):
        self.key = key
        self.algorithms = list(algorithms)
        self.audience = audience
        self.issuer = issuer

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenVerifier":
        return cls(
            settings.jwt_verify_key,
            algorithms=settings.jwt_algorithms,
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.key)

    def verify(self, token: str) -> Dict[str, Any]:
        """Decode ``token`` and return its claims, or raise AuthenticationError."""
        if not token:
            raise AuthenticationError("Missing token")
        if not self.is_configured:
            logger.error("JWT_VERIFY_KEY not configured - rejecting token")
            raise AuthenticationError("Token verification is not configured")
        try:
            return jwt.decode(
                token,
                self.key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": bool(self.audience),
                    "verify_iss": bool(self.issuer),
                    "require": ["sub"],
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("rejected expired token")
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("rejected invalid token: %s", e)
            raise AuthenticationError(f"Invalid token: {e}") from e


def rider_from_claims(claims: Dict[str, Any]) -> Rider:
    sub = str(claims.get("sub") or "").strip()
    if not sub:
        raise AuthenticationError("Token has no subject")
    return Rider.from_dict(
        {
            "id": sub,
            "name": claims.get("name"),
            "email": claims.get("email"),
            "organization": claims.get("organization") or claims.get("org"),
        }
    )
