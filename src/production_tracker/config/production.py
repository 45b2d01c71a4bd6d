import os

from ..core.constants import DEFAULT_REMOTE_TIMEOUT_SEC, DEFAULT_SHEETS_URL_PREFIX, DEFAULT_TIMEZONE, PLACEHOLDER_SHEETS_URL

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False

DATA_FILE = os.getenv("DATA_FILE", "/var/lib/production-tracker/store.json")

SHEETS_API_URL = os.getenv("SHEETS_API_URL", PLACEHOLDER_SHEETS_URL)
SHEETS_URL_PREFIX = os.getenv("SHEETS_URL_PREFIX", DEFAULT_SHEETS_URL_PREFIX)
REMOTE_TIMEOUT_SEC = float(os.getenv("REMOTE_TIMEOUT_SEC", str(DEFAULT_REMOTE_TIMEOUT_SEC)))

AWAIT_REMOTE_DELETES = bool(int(os.getenv("AWAIT_REMOTE_DELETES", "1")))
AWAIT_REMOTE_SAVES = bool(int(os.getenv("AWAIT_REMOTE_SAVES", "0")))

AUTO_SEED_DEMO_DATA = bool(int(os.getenv("AUTO_SEED_DEMO_DATA", "0")))
SYNC_ON_STARTUP = bool(int(os.getenv("SYNC_ON_STARTUP", "1")))

LOG_FILE = os.getenv("LOG_FILE", "logs/production_tracker.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
TIMEZONE = os.getenv("TIMEZONE", DEFAULT_TIMEZONE)
