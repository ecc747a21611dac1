# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping, Optional


@dataclass
class Rider:
    """A vanpool user. Every field is optional; the empty Rider stands for "nobody"."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form; unset fields are dropped so the empty Rider is ``{}``."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rider":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for k, v in (data or {}).items():
            if k in known and v is not None:
                kwargs[k] = str(v)
        return cls(**kwargs)

    def is_empty(self) -> bool:
        return not self.to_dict()
