from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .analytics.service import AnalyticsService
from .common.events import EventBus, Notification
from .core.constants import DEFAULT_REMOTE_TIMEOUT_SEC, DEFAULT_SHEETS_URL_PREFIX, DEFAULT_TIMEZONE, STORAGE_KEYS
from .core.enums import NotificationLevel
from .offdays.service import OffDayService
from .production.service import ProductionService
from .remote.bridge import RemoteBridge, resolve_endpoint_url
from .storage.backend import InMemoryBackend, JsonFileBackend, KeyValueBackend
from .storage.service import StorageService, WritePolicy
from .users.service import AuthService, UserService

logger = logging.getLogger(__name__)

_NOTIFICATION_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Container:
    events: EventBus
    backend: KeyValueBackend
    bridge: RemoteBridge
    storage: StorageService

    auth_service: AuthService
    user_service: UserService
    off_day_service: OffDayService
    production_service: ProductionService
    analytics_service: AnalyticsService

    def close(self) -> None:
        self.storage.close()
        self.bridge.close()


def _log_notification(event: Notification) -> None:
    logger.log(_NOTIFICATION_LEVELS.get(event.level, logging.INFO), "Notification: %s", event.message)


def build_backend(data_file: Optional[str]) -> KeyValueBackend:
    if not data_file or data_file == "memory":
        return InMemoryBackend()
    return JsonFileBackend(data_file)


def build_container(
    settings: Any,
    *,
    backend: Optional[KeyValueBackend] = None,
    http_session: Optional[requests.Session] = None,
) -> Container:
    """Wire every service from a settings module (or any object with the same attributes).

    The returned storage is already open; call ``Container.close()`` when done.
    """
    events = EventBus()
    events.subscribe(Notification, _log_notification)

    backend = backend or build_backend(getattr(settings, "DATA_FILE", "memory"))
    configured_url = getattr(settings, "SHEETS_API_URL", None)
    prefix = getattr(settings, "SHEETS_URL_PREFIX", DEFAULT_SHEETS_URL_PREFIX)
    tz_name = getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)

    def endpoint_url() -> Optional[str]:
        return resolve_endpoint_url(backend.get_item(STORAGE_KEYS["remote_url"]), configured_url, prefix=prefix)

    bridge = RemoteBridge(
        endpoint_url,
        session=http_session,
        timeout=float(getattr(settings, "REMOTE_TIMEOUT_SEC", DEFAULT_REMOTE_TIMEOUT_SEC)),
    )
    storage = StorageService(
        backend,
        bridge,
        events=events,
        policy=WritePolicy(
            await_deletes=bool(getattr(settings, "AWAIT_REMOTE_DELETES", True)),
            await_saves=bool(getattr(settings, "AWAIT_REMOTE_SAVES", False)),
        ),
        seed_demo_production=bool(getattr(settings, "AUTO_SEED_DEMO_DATA", False)),
        tz_name=tz_name,
    )
    storage.open()

    off_day_service = OffDayService(storage)

    return Container(
        events=events,
        backend=backend,
        bridge=bridge,
        storage=storage,
        auth_service=AuthService(storage),
        user_service=UserService(storage),
        off_day_service=off_day_service,
        production_service=ProductionService(storage, off_day_service, tz_name=tz_name),
        analytics_service=AnalyticsService(storage),
    )
