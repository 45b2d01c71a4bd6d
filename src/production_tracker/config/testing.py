from ..core.constants import DEFAULT_SHEETS_URL_PREFIX, DEFAULT_TIMEZONE, PLACEHOLDER_SHEETS_URL

SECRET_KEY = "test-secret-key"

DEBUG = False
TESTING = True

DATA_FILE = "memory"

# Never talk to a real endpoint from tests
SHEETS_API_URL = PLACEHOLDER_SHEETS_URL
SHEETS_URL_PREFIX = DEFAULT_SHEETS_URL_PREFIX
REMOTE_TIMEOUT_SEC = 1.0

AWAIT_REMOTE_DELETES = True
AWAIT_REMOTE_SAVES = False

AUTO_SEED_DEMO_DATA = False
SYNC_ON_STARTUP = False

LOG_FILE = ""
LOG_LEVEL = "WARNING"
TIMEZONE = DEFAULT_TIMEZONE
