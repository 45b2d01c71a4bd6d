"""Read-only aggregations behind the dashboard, process analytics and log views.

Efficiency everywhere is ``actual / plan * 100`` rounded to one decimal, and
0 when nothing was planned.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

import pandas as pd

from ..core.constants import PROCESSES
from ..offdays.model import OffDay
from ..production.model import ProductionEntry
from ..storage.codec import encode
from ..storage.service import StorageService

_COLUMNS = ["entry_id", "date", "category", "process", "product_name", "plan_quantity", "actual_quantity", "manpower"]
_NUMERIC = ["plan_quantity", "actual_quantity", "manpower"]


@dataclass(frozen=True)
class DashboardStats:
    total_plan: float
    total_actual: float
    avg_efficiency: float
    total_manpower: float


def efficiency(actual: float, plan: float) -> float:
    return round(float(actual) / float(plan) * 100, 1) if plan and plan > 0 else 0.0


def _num(value) -> float:
    # pandas hands back numpy scalars; keep JSON-friendly ints where possible
    f = float(value)
    return int(f) if f.is_integer() else f


def _frame(entries: Iterable[ProductionEntry]) -> pd.DataFrame:
    df = pd.DataFrame([{c: getattr(e, c) for c in _COLUMNS} for e in entries], columns=_COLUMNS)
    for col in _NUMERIC:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    df["date"] = df["date"].fillna("").astype(str)
    df["month"] = df["date"].str[:7]
    return df


def _filter(
    df: pd.DataFrame,
    *,
    category: Optional[str] = None,
    process: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    if category and category != "All":
        mask &= df["category"] == category
    if process and process != "All":
        mask &= df["process"] == process
    if start:
        mask &= df["date"] >= start
    if end:
        mask &= df["date"] <= end
    return df[mask]


class AnalyticsService:
    def __init__(self, storage: StorageService):
        self._storage = storage

    def _entries(self) -> list[ProductionEntry]:
        return self._storage.get_production_data()

    def dashboard(self, category: str, month: str) -> dict:
        """Month view for one department: totals, per-process bars, daily groups."""
        entries = [e for e in self._entries() if e.category == category and e.date]
        df = _frame(entries)
        month_df = df[df["month"] == month]

        plan = month_df["plan_quantity"].sum()
        actual = month_df["actual_quantity"].sum()
        by_process = month_df.groupby("process")[["plan_quantity", "actual_quantity"]].sum()
        processes = [
            {
                "process": p,
                "plan": _num(by_process.at[p, "plan_quantity"]) if p in by_process.index else 0,
                "actual": _num(by_process.at[p, "actual_quantity"]) if p in by_process.index else 0,
            }
            for p in PROCESSES
        ]

        off_days = {od.date: od for od in self._storage.get_off_days() if od.date.startswith(month)}
        month_entries = [e for e in entries if e.date.startswith(month)]
        dates = sorted({e.date for e in month_entries} | set(off_days), reverse=True)
        daily = []
        for day in dates:
            day_entries = [e for e in month_entries if e.date == day]
            off_day: Optional[OffDay] = off_days.get(day)
            daily.append(
                {
                    "date": day,
                    "total_actual": _num(sum(e.actual_quantity for e in day_entries)),
                    "entries": [encode(e) for e in day_entries],
                    "is_off_day": off_day is not None,
                    "off_day_name": off_day.description if off_day else "",
                }
            )

        return {
            "category": category,
            "month": month,
            "plan": _num(plan),
            "actual": _num(actual),
            "efficiency": efficiency(actual, plan),
            "processes": processes,
            "daily": daily,
        }

    def process_metrics(
        self,
        *,
        category: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> dict:
        df = _filter(_frame(self._entries()), category=category, start=start, end=end)
        grouped = df.groupby("process").agg(
            plan=("plan_quantity", "sum"),
            actual=("actual_quantity", "sum"),
            count=("entry_id", "count"),
        )

        metrics = []
        for p in PROCESSES:
            row = grouped.loc[p] if p in grouped.index else None
            plan = _num(row["plan"]) if row is not None else 0
            actual = _num(row["actual"]) if row is not None else 0
            metrics.append(
                {
                    "process": p,
                    "plan": plan,
                    "actual": actual,
                    "count": int(row["count"]) if row is not None else 0,
                    "efficiency": efficiency(actual, plan),
                }
            )
        metrics.sort(key=lambda m: m["efficiency"], reverse=True)

        total_plan = sum(m["plan"] for m in metrics)
        total_actual = sum(m["actual"] for m in metrics)
        return {
            "processes": metrics,
            "total_plan": total_plan,
            "total_actual": total_actual,
            "avg_efficiency": efficiency(total_actual, total_plan),
            "peak_process": metrics[0] if metrics else None,
        }

    def daily_trend(
        self,
        *,
        category: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[dict]:
        """Mean per-entry efficiency per date, oldest first."""
        df = _filter(_frame(self._entries()), category=category, start=start, end=end)
        if df.empty:
            return []

        df = df.assign(
            efficiency=(df["actual_quantity"] / df["plan_quantity"] * 100).where(df["plan_quantity"] > 0, 0.0)
        )
        grouped = df.groupby("date").agg(
            efficiency=("efficiency", "mean"),
            actual=("actual_quantity", "sum"),
            count=("entry_id", "count"),
        )
        return [
            {
                "date": day,
                "efficiency": round(float(row["efficiency"]), 1),
                "actual": _num(row["actual"]),
                "count": int(row["count"]),
            }
            for day, row in grouped.sort_index().iterrows()
        ]

    def monthly_summary(
        self,
        *,
        category: Optional[str] = None,
        process: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[dict]:
        df = _filter(_frame(self._entries()), category=category, process=process, start=start, end=end)
        df = df[df["date"] != ""]
        if df.empty:
            return []

        grouped = df.groupby("month").agg(
            plan=("plan_quantity", "sum"),
            actual=("actual_quantity", "sum"),
            count=("entry_id", "count"),
        )
        return [
            {
                "month": month,
                "plan": _num(row["plan"]),
                "actual": _num(row["actual"]),
                "count": int(row["count"]),
                "efficiency": efficiency(row["actual"], row["plan"]),
            }
            for month, row in grouped.sort_index().iterrows()
        ]

    def top_products(
        self,
        *,
        category: Optional[str] = None,
        process: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        limit: int = 10,
    ) -> list[dict]:
        df = _filter(_frame(self._entries()), category=category, process=process, start=start, end=end)
        if df.empty:
            return []

        grouped = df.groupby("product_name", sort=False).agg(
            plan=("plan_quantity", "sum"),
            actual=("actual_quantity", "sum"),
        )
        grouped = grouped.sort_values("plan", ascending=False, kind="mergesort").head(int(limit))
        return [
            {"product_name": name, "plan": _num(row["plan"]), "actual": _num(row["actual"])}
            for name, row in grouped.iterrows()
        ]

    def stats(self) -> DashboardStats:
        df = _frame(self._entries())
        total_plan = _num(df["plan_quantity"].sum())
        total_actual = _num(df["actual_quantity"].sum())
        return DashboardStats(
            total_plan=total_plan,
            total_actual=total_actual,
            avg_efficiency=efficiency(total_actual, total_plan),
            total_manpower=_num(df["manpower"].sum()),
        )
