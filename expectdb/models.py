from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Model:
    """Common base record: primary key plus the usual timestamps."""

    id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
