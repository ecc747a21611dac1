# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session helpers.

This package provides:
- Signed session cookies (itsdangerous)
- Anti-forgery state tokens
- Bearer token verification (PyJWT)
"""
