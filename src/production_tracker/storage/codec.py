"""Record codec.

Two ways in:

* ``normalize_*`` is the lenient path used for our own local data. It accepts a
  keyed mapping, a positional row in v1 column order, an already-built record
  or junk, and always returns a record with type-appropriate defaults.
* ``decode_record`` / ``decode_collection`` is the strict path used for remote
  payloads. Positional rows need an explicit schema marker, identifying fields
  must be present and typed fields must parse. Anything else comes back as
  ``Unparseable`` instead of an all-default record.

``encode`` turns a record back into its camelCase wire/storage form.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar, Union

from ..activity.model import ActivityLog
from ..common.datetime_utils import date_only, db_timestamp, is_iso_date
from ..core.constants import (
    DEFAULT_ACTOR_NAME,
    DEFAULT_CATEGORY,
    DEFAULT_LOG_ACTION,
    DEFAULT_OFF_DAY_DESCRIPTION,
    DEFAULT_PROCESS,
    DEFAULT_PRODUCT_NAME,
)
from ..core.enums import Role, Unit
from ..offdays.model import OffDay
from ..production.model import ProductionEntry
from ..users.model import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _raw(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _text(value: Any, default: str = "") -> str:
    value = _raw(value)
    if value is None or value == "" or value is False:
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _parse_number(value: Any) -> Optional[Union[int, float]]:
    """Number or None when the value does not look numeric at all."""
    value = _raw(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def _number(value: Any) -> Union[int, float]:
    if value is None or value == "":
        return 0
    parsed = _parse_number(value)
    return 0 if parsed is None else parsed


def _unit(value: Any) -> Unit:
    code = _text(value, Unit.KG.value).strip().upper()
    try:
        return Unit(code)
    except ValueError:
        return Unit.KG


def _role(value: Any) -> Role:
    try:
        return Role(_text(value, Role.OPERATOR.value).strip().lower())
    except ValueError:
        return Role.OPERATOR


def new_record_id() -> str:
    return uuid.uuid4().hex


def _build_production(f: Mapping[str, Any]) -> ProductionEntry:
    return ProductionEntry(
        entry_id=_text(f.get("id")) or new_record_id(),
        date=date_only(f.get("date") or ""),
        category=_text(f.get("category"), DEFAULT_CATEGORY),
        process=_text(f.get("process"), DEFAULT_PROCESS),
        product_name=_text(f.get("productName"), DEFAULT_PRODUCT_NAME),
        plan_quantity=_number(f.get("planQuantity")),
        actual_quantity=_number(f.get("actualQuantity")),
        unit=_unit(f.get("unit")),
        batch_no=_text(f.get("batchNo")),
        manpower=_number(f.get("manpower")),
        remark=_text(f.get("remark")),
        last_updated_by=_text(f.get("lastUpdatedBy")),
        updated_at=_text(f.get("updatedAt")) or db_timestamp(),
    )


def _build_off_day(f: Mapping[str, Any]) -> OffDay:
    return OffDay(
        off_day_id=_text(f.get("id")) or new_record_id(),
        date=date_only(f.get("date") or ""),
        description=_text(f.get("description"), DEFAULT_OFF_DAY_DESCRIPTION),
        created_by=_text(f.get("createdBy"), DEFAULT_ACTOR_NAME),
    )


def _build_log(f: Mapping[str, Any]) -> ActivityLog:
    return ActivityLog(
        log_id=_text(f.get("id")) or new_record_id(),
        timestamp=_text(f.get("timestamp")) or db_timestamp(),
        user_id=_text(f.get("userId")),
        user_name=_text(f.get("userName"), DEFAULT_ACTOR_NAME),
        action=_text(f.get("action"), DEFAULT_LOG_ACTION),
        details=_text(f.get("details")),
    )


def _build_user(f: Mapping[str, Any]) -> User:
    return User(
        user_id=_text(f.get("id")) or new_record_id(),
        name=_text(f.get("name")),
        username=_text(f.get("username")),
        email=_text(f.get("email")),
        role=_role(f.get("role")),
        category=_text(f.get("category")) or None,
        password=_text(f.get("password")),
        avatar=_text(f.get("avatar")) or None,
    )


@dataclass(frozen=True)
class RecordKind:
    """How one collection is laid out on the wire.

    ``columns`` pairs each dataclass attribute with its wire name, in the v1
    positional order used by the spreadsheet.
    """

    name: str
    model: type
    columns: tuple[tuple[str, str], ...]
    build: Callable[[Mapping[str, Any]], Any]
    required: tuple[str, ...] = ()
    numeric: tuple[str, ...] = ()
    dates: tuple[str, ...] = ()
    keep: Callable[[Any], bool] = field(default=lambda record: True)

    @property
    def wire_names(self) -> tuple[str, ...]:
        return tuple(wire for _, wire in self.columns)

    @property
    def schema_tag(self) -> str:
        return f"{self.name}/v1"


PRODUCTION = RecordKind(
    name="production",
    model=ProductionEntry,
    columns=(
        ("entry_id", "id"),
        ("date", "date"),
        ("category", "category"),
        ("process", "process"),
        ("product_name", "productName"),
        ("plan_quantity", "planQuantity"),
        ("actual_quantity", "actualQuantity"),
        ("unit", "unit"),
        ("batch_no", "batchNo"),
        ("manpower", "manpower"),
        ("last_updated_by", "lastUpdatedBy"),
        ("updated_at", "updatedAt"),
        ("remark", "remark"),
    ),
    build=_build_production,
    required=("id", "date"),
    numeric=("planQuantity", "actualQuantity", "manpower"),
    dates=("date",),
    keep=lambda entry: bool(entry.date),
)

OFF_DAYS = RecordKind(
    name="off_days",
    model=OffDay,
    columns=(
        ("off_day_id", "id"),
        ("date", "date"),
        ("description", "description"),
        ("created_by", "createdBy"),
    ),
    build=_build_off_day,
    required=("date",),
    dates=("date",),
    keep=lambda off_day: bool(off_day.date),
)

LOGS = RecordKind(
    name="logs",
    model=ActivityLog,
    columns=(
        ("log_id", "id"),
        ("timestamp", "timestamp"),
        ("user_id", "userId"),
        ("user_name", "userName"),
        ("action", "action"),
        ("details", "details"),
    ),
    build=_build_log,
    required=("timestamp",),
)

USERS = RecordKind(
    name="users",
    model=User,
    columns=(
        ("user_id", "id"),
        ("name", "name"),
        ("username", "username"),
        ("email", "email"),
        ("role", "role"),
        ("category", "category"),
        ("password", "password"),
        ("avatar", "avatar"),
    ),
    build=_build_user,
    required=("id", "username"),
)

KINDS: dict[str, RecordKind] = {kind.name: kind for kind in (PRODUCTION, OFF_DAYS, LOGS, USERS)}
_KINDS_BY_MODEL: dict[type, RecordKind] = {kind.model: kind for kind in KINDS.values()}
SCHEMAS: dict[str, RecordKind] = {kind.schema_tag: kind for kind in KINDS.values()}


# ---------------------------------------------------------------------------
# Lenient path (local data)
# ---------------------------------------------------------------------------

def encode(record: Any) -> dict[str, Any]:
    kind = _KINDS_BY_MODEL.get(type(record))
    if kind is None:
        raise TypeError(f"Cannot encode {type(record).__name__}")

    out: dict[str, Any] = {}
    for attr, wire in kind.columns:
        value = _raw(getattr(record, attr))
        if value is not None:
            out[wire] = value
    return out


def normalize(kind: RecordKind, data: Any):
    if isinstance(data, kind.model):
        data = encode(data)

    if isinstance(data, (list, tuple)):
        fields = dict(zip(kind.wire_names, data))
    elif isinstance(data, Mapping):
        fields = data
    else:
        fields = {}
    return kind.build(fields)


def normalize_production(data: Any) -> ProductionEntry:
    return normalize(PRODUCTION, data)


def normalize_off_day(data: Any) -> OffDay:
    return normalize(OFF_DAYS, data)


def normalize_log(data: Any) -> ActivityLog:
    return normalize(LOGS, data)


def normalize_user(data: Any) -> User:
    return normalize(USERS, data)


def clean_collection(kind: RecordKind, items: Iterable[Any]) -> list:
    """Normalize every item and drop the ones the collection cannot hold (e.g. no date)."""
    records = [normalize(kind, item) for item in items]
    return [r for r in records if kind.keep(r)]


# ---------------------------------------------------------------------------
# Strict path (remote payloads)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Decoded(Generic[T]):
    record: T


@dataclass(frozen=True)
class Unparseable:
    reason: str
    raw: Any = None


DecodeResult = Union[Decoded, Unparseable]


@dataclass(frozen=True)
class RowSchema:
    """Column layout announced by the remote side for positional rows."""

    tag: str
    columns: tuple[str, ...]


@dataclass(frozen=True)
class DecodedCollection:
    records: list
    rejected: list[Unparseable]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def decode_record(kind: RecordKind, raw: Any, schema: Optional[RowSchema] = None) -> DecodeResult:
    if isinstance(raw, Mapping):
        fields = raw
    elif isinstance(raw, (list, tuple)):
        if schema is None:
            return Unparseable("positional row without a schema marker", raw)
        if len(raw) > len(schema.columns):
            return Unparseable(
                f"row has {len(raw)} values but {schema.tag} names {len(schema.columns)} columns", raw
            )
        fields = dict(zip(schema.columns, raw))
    else:
        return Unparseable(f"expected an object or a row, got {type(raw).__name__}", raw)

    for wire in kind.required:
        if _is_blank(fields.get(wire)):
            return Unparseable(f"missing {wire}", raw)

    for wire in kind.numeric:
        value = fields.get(wire)
        if not _is_blank(value) and _parse_number(value) is None:
            return Unparseable(f"{wire} is not a number: {value!r}", raw)

    for wire in kind.dates:
        value = fields.get(wire)
        if not _is_blank(value) and not is_iso_date(date_only(value)):
            return Unparseable(f"{wire} is not a date: {value!r}", raw)

    return Decoded(kind.build(fields))


def unwrap_payload(kind: RecordKind, payload: Any) -> Optional[tuple[list, Optional[RowSchema]]]:
    """Split a fetched payload into rows and the schema they were announced with.

    A bare JSON array carries no schema. An envelope
    ``{"schema": "<kind>/v1", "rows": [...], "columns": [...]?}`` does; with
    ``columns`` the row order is taken from the header instead of v1 order.
    Returns None when the payload cannot be trusted as a whole.
    """
    if isinstance(payload, list):
        return payload, None

    if not isinstance(payload, Mapping) or not isinstance(payload.get("rows"), list):
        return None

    tag = payload.get("schema")
    if not tag:
        logger.warning("Rejecting %s envelope without a schema marker", kind.name)
        return None
    if SCHEMAS.get(tag) is not kind:
        logger.warning("Rejecting %s envelope with unknown schema %r", kind.name, tag)
        return None

    columns = payload.get("columns")
    if columns is None:
        return payload["rows"], RowSchema(tag=tag, columns=kind.wire_names)

    if not isinstance(columns, list) or not all(c in kind.wire_names for c in columns):
        logger.warning("Rejecting %s envelope with unknown columns %r", kind.name, columns)
        return None
    if len(set(columns)) != len(columns):
        logger.warning("Rejecting %s envelope with duplicate columns %r", kind.name, columns)
        return None
    return payload["rows"], RowSchema(tag=tag, columns=tuple(columns))


def decode_collection(kind: RecordKind, payload: Any) -> Optional[DecodedCollection]:
    unwrapped = unwrap_payload(kind, payload)
    if unwrapped is None:
        return None

    rows, schema = unwrapped
    records: list = []
    rejected: list[Unparseable] = []
    for raw in rows:
        result = decode_record(kind, raw, schema)
        if isinstance(result, Decoded):
            records.append(result.record)
        else:
            rejected.append(result)

    if rejected:
        logger.warning(
            "Dropped %d unparseable %s record(s); first reason: %s",
            len(rejected),
            kind.name,
            rejected[0].reason,
        )
    return DecodedCollection(records=records, rejected=rejected)
