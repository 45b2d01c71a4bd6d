from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OffDay:
    off_day_id: str
    date: str
    description: str
    created_by: str
