# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Type

from fastapi import Request, Response
from itsdangerous import BadSignature, BadTimeSignature, SignatureExpired, URLSafeTimedSerializer

from vanpool.config import Settings
from vanpool.errors import SessionStoreError
from vanpool.model import Rider

logger = logging.getLogger(__name__)

SELF_KEY = "self"
AUTHENTICATED_KEY = "authenticated"
STATE_KEY = "state"

_TYPE_TAG = "__type__"
_VALUE_TAG = "value"


@dataclass
class Session:
    """Session record: the key/value mapping persisted in the session cookie."""

    name: str
    values: Dict[str, Any] = field(default_factory=dict)
    saved: bool = False

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.values[key] = value
        self.saved = False

    def __contains__(self, key: str) -> bool:
        return key in self.values


class SessionStore(ABC):
    """Interface for session persistence. ``get`` loads, ``save`` writes onto the response."""

    @abstractmethod
    def get(self, request: Request) -> Session:
        pass

    @abstractmethod
    def save(self, session: Session, response: Response) -> None:
        pass


class CookieStore(SessionStore):
    """Stateless store: the whole record lives in a signed cookie."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.cookie_name = settings.cookie_name
        self._serializer = URLSafeTimedSerializer(
            secret_key=settings.cookie_key, salt=settings.session_salt
        )
        self._encoders: Dict[Type, Callable[[Any], Dict[str, Any]]] = {}
        self._decoders: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.register_type(Rider, Rider.to_dict, Rider.from_dict)

    def register_type(
        self,
        cls: Type,
        encode: Callable[[Any], Dict[str, Any]],
        decode: Callable[[Dict[str, Any]], Any],
    ) -> None:
        """Allow instances of ``cls`` to be stored as session values."""
        tag = cls.__name__
        self._encoders[cls] = encode
        self._decoders[tag] = decode

    # --- codec -------------------------------------------------------------

    def _encode_value(self, value: Any) -> Any:
        enc = self._encoders.get(type(value))
        if enc is None:
            return value
        return {_TYPE_TAG: type(value).__name__, _VALUE_TAG: enc(value)}

    def _decode_value(self, value: Any) -> Any:
        if not isinstance(value, dict) or _TYPE_TAG not in value:
            return value
        dec = self._decoders.get(str(value.get(_TYPE_TAG)))
        inner = value.get(_VALUE_TAG)
        if dec is None or not isinstance(inner, dict):
            # Unknown type: leave the raw dict, callers treat it as absent.
            return value
        return dec(inner)

    def encode(self, values: Dict[str, Any]) -> str:
        try:
            return self._serializer.dumps({k: self._encode_value(v) for k, v in values.items()})
        except (TypeError, ValueError) as e:
            raise SessionStoreError(f"Failed to encode session: {e}", code="session_save_failed") from e

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            data = self._serializer.loads(token, max_age=self.settings.session_max_age)
        except SignatureExpired as e:
            raise SessionStoreError(f"Session expired: {e}") from e
        except (BadSignature, BadTimeSignature) as e:
            raise SessionStoreError(f"Invalid session signature: {e}") from e
        if not isinstance(data, dict):
            raise SessionStoreError("Session payload is not an object")
        return {str(k): self._decode_value(v) for k, v in data.items()}

    # --- store -------------------------------------------------------------

    def get(self, request: Request) -> Session:
        token = request.cookies.get(self.cookie_name, "")
        if not token:
            logger.debug("no %s cookie, starting a new session", self.cookie_name)
            return Session(name=self.cookie_name)
        return Session(name=self.cookie_name, values=self.decode(token))

    def save(self, session: Session, response: Response) -> None:
        response.set_cookie(self.cookie_name, self.encode(session.values), **self.settings.cookie_settings())
        session.saved = True
        logger.debug("saved session %s (keys: %s)", session.name, sorted(session.values))
