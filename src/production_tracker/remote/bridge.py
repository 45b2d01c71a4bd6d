"""HTTP bridge to the spreadsheet-backed endpoint.

Best effort in both directions: a failed fetch is logged and returns None, a
save reports only whether it could be dispatched. The endpoint's answer to a
save is never inspected, so a dropped write is only visible on the next pull.
"""

from __future__ import annotations

import logging
import random
import string
from typing import Any, Callable, Optional

import requests

from ..common.datetime_utils import epoch_millis
from ..core.constants import DEFAULT_REMOTE_TIMEOUT_SEC, DEFAULT_SHEETS_URL_PREFIX

logger = logging.getLogger(__name__)


def resolve_endpoint_url(
    saved_url: Optional[str],
    configured_url: Optional[str],
    *,
    prefix: str = DEFAULT_SHEETS_URL_PREFIX,
) -> Optional[str]:
    """Pick the endpoint: the user-entered value first, then the configured one.

    A value only counts when it starts with ``prefix``; the shipped placeholder
    therefore leaves the bridge disabled.
    """
    for candidate in (saved_url, configured_url):
        if candidate and candidate.strip().startswith(prefix):
            return candidate.strip()
    return None


def _cache_buster() -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=6))


class RemoteBridge:
    def __init__(
        self,
        url_provider: Callable[[], Optional[str]],
        *,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_REMOTE_TIMEOUT_SEC,
    ):
        self._url_provider = url_provider
        self._session = session or requests.Session()
        self._timeout = float(timeout)

    def active_url(self) -> Optional[str]:
        return self._url_provider()

    def is_enabled(self) -> bool:
        return bool(self.active_url())

    def fetch(self, action: str) -> Optional[Any]:
        url = self.active_url()
        if not url:
            return None

        params = {"action": action, "_t": epoch_millis(), "_s": _cache_buster()}
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Sheets fetch error (%s): %s", action, e)
            return None
        except ValueError as e:
            logger.error("Sheets fetch error (%s): response is not JSON: %s", action, e)
            return None

    def save(self, action: str, payload: Any) -> bool:
        url = self.active_url()
        if not url:
            return False

        body = {"action": action, "data": payload, "timestamp": epoch_millis()}
        try:
            self._session.post(url, json=body, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Sheets save error (%s): %s", action, e)
            return False
        return True

    def close(self) -> None:
        self._session.close()
