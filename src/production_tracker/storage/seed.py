"""Default records written into an empty store."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import db_timestamp, today_iso
from ..core.constants import CATEGORIES, PROCESSES
from ..core.enums import Role, Unit
from ..offdays.model import OffDay
from ..production.model import ProductionEntry
from ..users.model import User

INITIAL_USERS: tuple[User, ...] = (
    User("u1", "Admin User", "admin", "admin@halagel.com", Role.ADMIN, None, "password123"),
    User("u2", "Healthcare Manager", "manager", "manager@halagel.com", Role.MANAGER, "Healthcare", "password123"),
    User("u3", "Planner Staff", "planner", "planner@halagel.com", Role.PLANNER, "Toothpaste", "password123"),
    User("u4", "Operator Healthcare", "operator", "op.health@halagel.com", Role.OPERATOR, "Healthcare", "password123"),
    User("u5", "Operator Toothpaste", "operator2", "op.paste@halagel.com", Role.OPERATOR, "Toothpaste", "password123"),
)

INITIAL_OFF_DAYS: tuple[OffDay, ...] = (
    OffDay("od1", "2025-12-25", "Christmas Day", "u1"),
    OffDay("od2", "2026-01-01", "New Year", "u1"),
)

DEMO_PRODUCTS = (
    "Pain Relief Gel",
    "Minty Fresh",
    "Pink Salt Fine",
    "Vitamin C",
    "Charcoal Paste",
    "Herbal Shampoo",
    "Skin Repair Cream",
)


def generate_seed_production(
    *,
    days: int = 30,
    today: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> list[ProductionEntry]:
    """Randomized plan/actual history for the last ``days`` days, ending today.

    Roughly one product in five is skipped on each day; actuals land between
    80% and 100% of plan.
    """
    rng = rng or random.Random()
    base = datetime.strptime(today or today_iso(), "%Y-%m-%d")
    stamp = db_timestamp()

    entries: list[ProductionEntry] = []
    for i in range(days):
        date_str = (base - timedelta(days=i)).strftime("%Y-%m-%d")
        for idx, product in enumerate(DEMO_PRODUCTS):
            if rng.random() > 0.8:
                continue

            plan = rng.randint(500, 999)
            actual = int(plan * (0.8 + rng.random() * 0.2))
            entries.append(
                ProductionEntry(
                    entry_id=f"seed-{i}-{idx}",
                    date=date_str,
                    category=CATEGORIES[idx % len(CATEGORIES)],
                    process=PROCESSES[idx % len(PROCESSES)],
                    product_name=product,
                    plan_quantity=plan,
                    actual_quantity=actual,
                    unit=Unit.KG if idx % 2 == 0 else Unit.PCS,
                    batch_no=f"B-{date_str.replace('-', '')}-{idx}",
                    manpower=rng.randint(3, 7),
                    last_updated_by="u1",
                    updated_at=stamp,
                )
            )
    return entries
