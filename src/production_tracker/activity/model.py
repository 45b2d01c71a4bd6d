from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActivityLog:
    """Append-only audit entry."""

    log_id: str
    timestamp: str
    user_id: str
    user_name: str
    action: str
    details: str
