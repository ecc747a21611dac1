# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Dict

from fastapi.responses import JSONResponse


class VanpoolError(Exception):
    """Base error. Carries the HTTP status and error code it maps to."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, code: str = ""):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def payload(self) -> Dict[str, str]:
        return {"error": self.code, "message": self.message}


class ConfigurationError(VanpoolError):
    code = "configuration_error"


class SessionStoreError(VanpoolError):
    code = "session_invalid"


class StateError(VanpoolError):
    code = "state_unavailable"


class AuthenticationError(VanpoolError):
    status_code = 401
    code = "invalid_token"


class SerializationError(VanpoolError):
    code = "serialization_failed"


class SessionContextMissing(VanpoolError):
    code = "session_missing"


def error_response(err: VanpoolError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content=err.payload())
