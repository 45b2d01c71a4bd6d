from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..core.enums import Unit

Quantity = Union[int, float]


@dataclass(frozen=True)
class ProductionEntry:
    """Domain entity: one plan line, and its actual output once recorded."""

    entry_id: str
    date: str
    category: str
    process: str
    product_name: str
    plan_quantity: Quantity
    actual_quantity: Quantity
    unit: Unit
    batch_no: str = ""
    manpower: Quantity = 0
    remark: str = ""
    last_updated_by: str = ""
    updated_at: str = ""

    @property
    def has_actual(self) -> bool:
        return self.actual_quantity > 0
