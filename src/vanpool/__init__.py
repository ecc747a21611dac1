# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Vanpool session service.

Signed-cookie sessions for the vanpool web application: every request gets a
session carrying an anti-forgery state token, an authenticated flag and the
current Rider.
"""

__version__ = "0.1.0"
