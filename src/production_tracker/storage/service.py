"""Local store for the four record collections and the session record.

Reads never raise: a missing or corrupt blob is an empty collection. Every
save writes locally first and then hands the cleaned collection to the remote
mirror; whether the caller waits for that dispatch is decided by the
``WritePolicy`` (by default only deletions wait).
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Protocol

from ..activity.model import ActivityLog
from ..common.datetime_utils import db_timestamp
from ..common.events import CollectionChanged, EventBus, SyncCompleted
from ..core.constants import DEFAULT_TIMEZONE, FETCH_ACTIONS, LOG_CAP, SAVE_ACTIONS, STORAGE_KEYS
from ..core.exceptions import StorageNotOpenError
from ..offdays.model import OffDay
from ..production.model import ProductionEntry
from ..users.model import User
from .backend import KeyValueBackend
from .codec import (
    KINDS,
    LOGS,
    OFF_DAYS,
    PRODUCTION,
    USERS,
    RecordKind,
    clean_collection,
    decode_collection,
    encode,
    new_record_id,
    normalize_user,
)
from .seed import INITIAL_OFF_DAYS, INITIAL_USERS, generate_seed_production

logger = logging.getLogger(__name__)

SYNC_ORDER = ("production", "off_days", "logs", "users")


class RemoteMirror(Protocol):
    def is_enabled(self) -> bool:
        raise NotImplementedError

    def fetch(self, action: str) -> Optional[Any]:
        raise NotImplementedError

    def save(self, action: str, payload: Any) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class WritePolicy:
    """Which local writes wait for their remote dispatch before returning."""

    await_deletes: bool = True
    await_saves: bool = False


@dataclass(frozen=True)
class DeleteResult:
    entries: list[ProductionEntry]
    deleted: Optional[ProductionEntry]
    # None when the remote dispatch was not awaited (or nothing was deleted).
    remote_ok: Optional[bool] = None


@dataclass(frozen=True)
class SyncReport:
    enabled: bool
    updated: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    rejected: dict[str, int] = field(default_factory=dict)


def _completed(value: bool) -> Future:
    fut: Future = Future()
    fut.set_result(value)
    return fut


def _log_failed_mirror(fut: Future) -> None:
    exc = fut.exception()
    if exc is not None:
        logger.error("Remote mirror dispatch failed: %s", exc)


class StorageService:
    def __init__(
        self,
        backend: KeyValueBackend,
        bridge: Optional[RemoteMirror] = None,
        *,
        events: Optional[EventBus] = None,
        policy: Optional[WritePolicy] = None,
        seed_demo_production: bool = False,
        log_cap: int = LOG_CAP,
        tz_name: str = DEFAULT_TIMEZONE,
    ):
        self._backend = backend
        self._bridge = bridge
        self._events = events or EventBus()
        self._policy = policy or WritePolicy()
        self._seed_demo_production = bool(seed_demo_production)
        self._log_cap = int(log_cap)
        self._tz_name = tz_name
        self._executor: Optional[ThreadPoolExecutor] = None

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> "StorageService":
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="sheets-mirror")
            self._seed_defaults()
        return self

    def close(self) -> None:
        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    def __enter__(self) -> "StorageService":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._executor is not None

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def policy(self) -> WritePolicy:
        return self._policy

    def _seed_defaults(self) -> None:
        defaults: dict[str, Iterable] = {
            "users": INITIAL_USERS,
            "off_days": INITIAL_OFF_DAYS,
            "production": generate_seed_production() if self._seed_demo_production else (),
            "logs": (),
        }
        for collection, records in defaults.items():
            if self._backend.get_item(STORAGE_KEYS[collection]) is None:
                self._write_list(collection, list(records), source="seed")
                logger.info("Seeded empty %s collection", collection)

    # -- raw helpers -------------------------------------------------------

    def _read_list(self, collection: str) -> list:
        raw = self._backend.get_item(STORAGE_KEYS[collection])
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Stored %s is not valid JSON, reading as empty: %s", collection, e)
            return []
        return data if isinstance(data, list) else []

    def _write_list(self, collection: str, records: list, *, source: str = "local") -> list[dict]:
        payload = [encode(r) for r in records]
        self._backend.set_item(STORAGE_KEYS[collection], json.dumps(payload, ensure_ascii=False))
        self._events.publish(CollectionChanged(collection=collection, source=source))
        return payload

    def _mirror(self, collection: str, payload: list[dict], *, wait: bool) -> Future:
        if self._bridge is None or not self._bridge.is_enabled():
            return _completed(False)
        if self._executor is None:
            raise StorageNotOpenError("StorageService.open() must be called before saving")

        fut = self._executor.submit(self._bridge.save, SAVE_ACTIONS[collection], payload)
        fut.add_done_callback(_log_failed_mirror)
        if wait:
            fut.exception()
        return fut

    def _load(self, kind: RecordKind) -> list:
        return clean_collection(kind, self._read_list(kind.name))

    def _save(self, kind: RecordKind, records: Iterable[Any], *, wait: bool) -> Future:
        cleaned = clean_collection(kind, records)
        payload = self._write_list(kind.name, cleaned)
        return self._mirror(kind.name, payload, wait=wait)

    # -- collections -------------------------------------------------------

    def get_users(self) -> list[User]:
        return self._load(USERS)

    def save_users(self, users: Iterable[User]) -> Future:
        return self._save(USERS, users, wait=self._policy.await_saves)

    def get_production_data(self) -> list[ProductionEntry]:
        return self._load(PRODUCTION)

    def save_production_data(self, entries: Iterable[ProductionEntry]) -> Future:
        return self._save(PRODUCTION, entries, wait=self._policy.await_saves)

    def delete_production_entry(self, entry_id: str) -> DeleteResult:
        target = str(entry_id)
        entries = self.get_production_data()
        deleted = next((e for e in entries if e.entry_id == target), None)
        if deleted is None:
            return DeleteResult(entries=entries, deleted=None)

        remaining = [e for e in entries if e.entry_id != target]
        try:
            fut = self._save(PRODUCTION, remaining, wait=self._policy.await_deletes)
        except OSError as e:
            logger.error("Storage delete error: %s", e)
            return DeleteResult(entries=self.get_production_data(), deleted=None, remote_ok=False)

        remote_ok = None
        if self._policy.await_deletes:
            remote_ok = bool(fut.result()) if fut.exception() is None else False
        return DeleteResult(entries=remaining, deleted=deleted, remote_ok=remote_ok)

    def get_off_days(self) -> list[OffDay]:
        return self._load(OFF_DAYS)

    def save_off_days(self, off_days: Iterable[OffDay]) -> Future:
        return self._save(OFF_DAYS, off_days, wait=self._policy.await_saves)

    def get_logs(self) -> list[ActivityLog]:
        return self._load(LOGS)

    def add_log(self, *, user_id: str, user_name: str, action: Any, details: str) -> Optional[ActivityLog]:
        """Prepend an entry and keep only the newest ``log_cap`` entries.

        Never raises; an audit failure must not fail the action being audited.
        """
        try:
            entry = ActivityLog(
                log_id=new_record_id(),
                timestamp=db_timestamp(self._tz_name),
                user_id=str(user_id),
                user_name=str(user_name),
                action=str(getattr(action, "value", action)),
                details=str(details),
            )
            logs = [entry, *self.get_logs()][: self._log_cap]
            self._save(LOGS, logs, wait=self._policy.await_saves)
            return entry
        except Exception:
            logger.exception("Logging error")
            return None

    # -- session -----------------------------------------------------------

    def get_session(self) -> Optional[User]:
        raw = self._backend.get_item(STORAGE_KEYS["session"])
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            return None
        return normalize_user(data) if isinstance(data, dict) else None

    def set_session(self, user: Optional[User]) -> None:
        key = STORAGE_KEYS["session"]
        if user is not None:
            self._backend.set_item(key, json.dumps(encode(user), ensure_ascii=False))
        else:
            self._backend.remove_item(key)
        self._events.publish(CollectionChanged(collection="session"))

    # -- remote ------------------------------------------------------------

    def get_saved_remote_url(self) -> str:
        return self._backend.get_item(STORAGE_KEYS["remote_url"]) or ""

    def set_remote_url(self, url: Optional[str]) -> None:
        self._backend.set_item(STORAGE_KEYS["remote_url"], (url or "").strip())

    def remote_enabled(self) -> bool:
        return self._bridge is not None and self._bridge.is_enabled()

    def sync_with_remote(self) -> SyncReport:
        """Pull all four collections and overwrite the local copies.

        Collections whose fetch failed are left as they are. There is no merge:
        the last successful pull wins, per collection.
        """
        if not self.remote_enabled():
            return SyncReport(enabled=False)

        try:
            with ThreadPoolExecutor(max_workers=len(SYNC_ORDER), thread_name_prefix="sheets-fetch") as pool:
                futures = {name: pool.submit(self._bridge.fetch, FETCH_ACTIONS[name]) for name in SYNC_ORDER}
                results = {name: fut.result() for name, fut in futures.items()}

            updated: list[str] = []
            skipped: list[str] = []
            rejected: dict[str, int] = {}
            for name in SYNC_ORDER:
                kind = KINDS[name]
                decoded = decode_collection(kind, results[name]) if results[name] is not None else None
                if decoded is None:
                    skipped.append(name)
                    continue
                if decoded.rejected:
                    rejected[name] = len(decoded.rejected)
                if decoded.rejected and not decoded.records:
                    # an all-rejected payload never replaces local data
                    logger.warning("Every remote %s record was unparseable, keeping local copy", name)
                    skipped.append(name)
                    continue

                self._write_list(name, [r for r in decoded.records if kind.keep(r)], source="remote")
                updated.append(name)
        except Exception:
            logger.exception("Critical sync failure")
            raise

        report = SyncReport(enabled=True, updated=tuple(updated), skipped=tuple(skipped), rejected=rejected)
        logger.info("Sync finished: updated=%s skipped=%s rejected=%s", report.updated, report.skipped, rejected)
        self._events.publish(SyncCompleted(updated=report.updated, skipped=report.skipped))
        return report
