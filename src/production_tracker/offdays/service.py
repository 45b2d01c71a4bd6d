from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import date_only
from ..common.events import Notification
from ..common.validators import require_iso_date, require_role
from ..core.constants import DEFAULT_OFF_DAY_DESCRIPTION
from ..core.enums import LogAction, NotificationLevel, Role
from ..core.exceptions import ValidationError
from ..storage.codec import new_record_id
from ..storage.service import StorageService
from ..users.model import User
from .model import OffDay


class OffDayService:
    """Use case: maintain the calendar of days on which production is blocked."""

    def __init__(self, storage: StorageService):
        self._storage = storage

    def list_off_days(self) -> list[OffDay]:
        return sorted(self._storage.get_off_days(), key=lambda od: od.date)

    def find_for_date(self, date: str) -> Optional[OffDay]:
        key = date_only(date)
        if not key:
            return None
        return next((od for od in self._storage.get_off_days() if od.date == key), None)

    def add_off_day(self, actor: User, *, date: str, description: str = "") -> OffDay:
        require_role(actor, Role.ADMIN, Role.MANAGER)
        date = require_iso_date(date)

        current = self._storage.get_off_days()
        if any(od.date == date for od in current):
            raise ValidationError("Date already marked as off day")

        off_day = OffDay(
            off_day_id=new_record_id(),
            date=date,
            description=(description or "").strip().upper() or DEFAULT_OFF_DAY_DESCRIPTION.upper(),
            created_by=actor.user_id,
        )
        updated = sorted([*current, off_day], key=lambda od: od.date)
        self._storage.save_off_days(updated)

        self._storage.add_log(
            user_id=actor.user_id,
            user_name=actor.name,
            action=LogAction.ADD_HOLIDAY,
            details=f"Scheduled public holiday: {off_day.description} ({off_day.date})",
        )
        self._storage.events.publish(Notification(f"PUBLIC HOLIDAY SET: {off_day.description} ({off_day.date})"))
        return off_day

    def delete_off_day(self, actor: User, off_day_id: str) -> OffDay:
        require_role(actor, Role.ADMIN, Role.MANAGER)

        current = self._storage.get_off_days()
        target = next((od for od in current if od.off_day_id == str(off_day_id)), None)
        if not target:
            raise ValidationError("Off day not found")

        self._storage.save_off_days([od for od in current if od.off_day_id != target.off_day_id])
        self._storage.add_log(
            user_id=actor.user_id,
            user_name=actor.name,
            action=LogAction.DELETE_HOLIDAY,
            details=f"Removed holiday: {target.description} ({target.date})",
        )
        self._storage.events.publish(Notification("HOLIDAY REMOVED FROM SYSTEM", NotificationLevel.INFO))
        return target
