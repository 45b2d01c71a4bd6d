from __future__ import annotations

import random
from dataclasses import replace
from typing import Optional

from ..common.datetime_utils import date_only, db_timestamp
from ..common.events import Notification
from ..common.validators import (
    parse_enum,
    require_choice,
    require_iso_date,
    require_non_empty,
    require_quantity,
    require_role,
)
from ..core.constants import CATEGORIES, DEFAULT_TIMEZONE, PROCESSES
from ..core.enums import LogAction, NotificationLevel, Role, Unit
from ..core.exceptions import AuthorizationError, ValidationError
from ..offdays.service import OffDayService
from ..storage.codec import new_record_id
from ..storage.service import DeleteResult, StorageService
from ..users.model import User
from .model import ProductionEntry

_PLANNERS = (Role.ADMIN, Role.MANAGER, Role.PLANNER)
_SUPERVISORS = (Role.ADMIN, Role.MANAGER)
_EVERYONE = tuple(Role)


def _sees(actor: User, entry: ProductionEntry) -> bool:
    # Operators bound to a department only see (and record) that department.
    if actor.role == Role.OPERATOR and actor.category:
        return entry.category == actor.category
    return True


class ProductionService:
    def __init__(self, storage: StorageService, off_days: OffDayService, *, tz_name: str = DEFAULT_TIMEZONE):
        self._storage = storage
        self._off_days = off_days
        self._tz_name = tz_name

    def _log(self, actor: User, action: LogAction, details: str) -> None:
        self._storage.add_log(user_id=actor.user_id, user_name=actor.name, action=action, details=details)

    def _notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        self._storage.events.publish(Notification(message=message, level=level))

    def _get(self, entries: list[ProductionEntry], entry_id: str) -> ProductionEntry:
        target = next((e for e in entries if e.entry_id == str(entry_id)), None)
        if not target:
            raise ValidationError("Production record not found")
        return target

    def _save_replacing(self, entries: list[ProductionEntry], updated: ProductionEntry) -> None:
        self._storage.save_production_data([updated if e.entry_id == updated.entry_id else e for e in entries])

    def list_entries(
        self,
        actor: Optional[User] = None,
        *,
        date: Optional[str] = None,
        category: Optional[str] = None,
        process: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[ProductionEntry]:
        """Entries matching the filters, newest date first."""
        day = date_only(date) if date else None
        rows = [
            e
            for e in self._storage.get_production_data()
            if (not day or e.date == day)
            and (not category or category == "All" or e.category == category)
            and (not process or process == "All" or e.process == process)
            and (not start or e.date >= start)
            and (not end or e.date <= end)
            and (actor is None or _sees(actor, e))
        ]
        return sorted(rows, key=lambda e: e.date, reverse=True)

    def plans_for_date(self, actor: User, date: str) -> list[ProductionEntry]:
        return self.list_entries(actor, date=require_iso_date(date))

    def generate_batch_no(self, date: str, *, rng: Optional[random.Random] = None) -> str:
        rng = rng or random.Random()
        return f"B-{date_only(date).replace('-', '')}-{rng.randrange(10000)}".upper()

    def create_plan(
        self,
        actor: User,
        *,
        date: str,
        category: str,
        process: str,
        product_name: str,
        plan_quantity: object,
        unit: Unit | str = Unit.KG,
        remark: str = "",
    ) -> ProductionEntry:
        require_role(actor, *_PLANNERS, message="Only planners, managers and admins can create plans")
        date = require_iso_date(date)
        off_day = self._off_days.find_for_date(date)
        if off_day:
            raise ValidationError(f"Production entry is prohibited on {off_day.description}")

        entry = ProductionEntry(
            entry_id=new_record_id(),
            date=date,
            category=require_choice(category, "Department", CATEGORIES),
            process=require_choice(process, "Process", PROCESSES),
            product_name=require_non_empty(product_name, "Product name").upper(),
            plan_quantity=require_quantity(plan_quantity, "Plan quantity"),
            actual_quantity=0,
            unit=parse_enum(Unit, unit, "Unit"),
            remark=(remark or "").strip().upper(),
            last_updated_by=actor.user_id,
            updated_at=db_timestamp(self._tz_name),
        )

        entries = self._storage.get_production_data()
        self._storage.save_production_data([*entries, entry])
        self._log(
            actor,
            LogAction.CREATE_PLAN,
            f"Planned {entry.plan_quantity} {entry.unit.value} for {entry.product_name} ({entry.date})",
        )
        self._notify("PLANNING COMPLETE")
        return entry

    def record_actual(
        self,
        actor: User,
        entry_id: str,
        *,
        actual_quantity: object,
        batch_no: str = "",
        manpower: object = 0,
        remark: str = "",
    ) -> ProductionEntry:
        require_role(actor, *_EVERYONE)
        entries = self._storage.get_production_data()
        target = self._get(entries, entry_id)

        if self._off_days.find_for_date(target.date):
            raise ValidationError("Cannot enter data on an Off Day")
        if not _sees(actor, target):
            raise AuthorizationError("Operators can only record actuals for their own department")

        updated = replace(
            target,
            actual_quantity=require_quantity(actual_quantity, "Actual quantity"),
            batch_no=(batch_no or "").strip().upper(),
            manpower=require_quantity(manpower or 0, "Manpower"),
            remark=(remark or "").strip().upper(),
            last_updated_by=actor.user_id,
            updated_at=db_timestamp(self._tz_name),
        )
        self._save_replacing(entries, updated)
        self._log(
            actor,
            LogAction.RECORD_ACTUAL,
            f"Updated actuals for {updated.product_name} [{updated.category}]: {updated.actual_quantity} units",
        )
        self._notify("SYSTEM UPDATED SUCCESSFULLY")
        return updated

    def edit_entry(self, actor: User, entry_id: str, **fields) -> ProductionEntry:
        """Rewrite any subset of an entry's editable fields.

        Accepted keys: date, category, process, product_name, unit,
        plan_quantity, actual_quantity, batch_no, manpower, remark.
        """
        require_role(actor, *_SUPERVISORS, message="Only managers and admins can edit records")
        entries = self._storage.get_production_data()
        target = self._get(entries, entry_id)

        changes: dict = {}
        for key, value in fields.items():
            if value is None:
                continue
            if key == "date":
                changes[key] = require_iso_date(value)
            elif key == "category":
                changes[key] = require_choice(value, "Department", CATEGORIES)
            elif key == "process":
                changes[key] = require_choice(value, "Process", PROCESSES)
            elif key == "product_name":
                changes[key] = require_non_empty(value, "Product name").upper()
            elif key == "unit":
                changes[key] = parse_enum(Unit, value, "Unit")
            elif key in ("plan_quantity", "actual_quantity", "manpower"):
                changes[key] = require_quantity(value, key.replace("_", " ").capitalize())
            elif key in ("batch_no", "remark"):
                changes[key] = str(value).strip().upper()
            else:
                raise ValidationError(f"Unknown field: {key}")

        updated = replace(target, **changes, last_updated_by=actor.user_id, updated_at=db_timestamp(self._tz_name))
        self._save_replacing(entries, updated)
        self._log(actor, LogAction.EDIT_RECORD, f"Modified record: {updated.product_name} ({updated.date})")
        self._notify("SYSTEM UPDATED SUCCESSFULLY")
        return updated

    def delete_entry(self, actor: User, entry_id: str) -> DeleteResult:
        require_role(actor, *_SUPERVISORS, message="Only managers and admins can delete records")

        result = self._storage.delete_production_entry(entry_id)
        if result.deleted:
            self._log(
                actor,
                LogAction.DELETE_RECORD,
                f"Deleted record: {result.deleted.product_name} ({result.deleted.date})",
            )
            self._notify("RECORD DELETED", NotificationLevel.INFO)
        return result
