import os

from ..core.constants import DEFAULT_REMOTE_TIMEOUT_SEC, DEFAULT_SHEETS_URL_PREFIX, DEFAULT_TIMEZONE, PLACEHOLDER_SHEETS_URL

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True

# JSON file holding every storage key; "memory" keeps everything in-process
DATA_FILE = os.getenv("DATA_FILE", "instance/production_store.json")

SHEETS_API_URL = os.getenv("SHEETS_API_URL", PLACEHOLDER_SHEETS_URL)
SHEETS_URL_PREFIX = os.getenv("SHEETS_URL_PREFIX", DEFAULT_SHEETS_URL_PREFIX)
REMOTE_TIMEOUT_SEC = float(os.getenv("REMOTE_TIMEOUT_SEC", str(DEFAULT_REMOTE_TIMEOUT_SEC)))

AWAIT_REMOTE_DELETES = bool(int(os.getenv("AWAIT_REMOTE_DELETES", "1")))
AWAIT_REMOTE_SAVES = bool(int(os.getenv("AWAIT_REMOTE_SAVES", "0")))

# Fill an empty store with 30 days of random production data
AUTO_SEED_DEMO_DATA = bool(int(os.getenv("AUTO_SEED_DEMO_DATA", "1")))
SYNC_ON_STARTUP = bool(int(os.getenv("SYNC_ON_STARTUP", "0")))

LOG_FILE = os.getenv("LOG_FILE", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
TIMEZONE = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
