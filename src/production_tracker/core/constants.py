"""Constants and defaults.

Note: Keep constants here to avoid magic strings spread across code.
"""

STORAGE_KEYS = {
    "users": "halagel_users",
    "production": "halagel_production",
    "off_days": "halagel_off_days",
    "logs": "halagel_activity_logs",
    "session": "halagel_current_user_session",
    "remote_url": "halagel_sheets_api_url",
}

CATEGORIES = ("Healthcare", "Toothpaste", "Rocksalt", "Cosmetic")
PROCESSES = ("Mixing", "Encapsulation", "Filling", "Sorting", "Packing")

DEFAULT_CATEGORY = "Healthcare"
DEFAULT_PROCESS = "Mixing"
DEFAULT_PRODUCT_NAME = "Unknown"
DEFAULT_OFF_DAY_DESCRIPTION = "Holiday"
DEFAULT_ACTOR_NAME = "System"
DEFAULT_LOG_ACTION = "LOG"

LOG_CAP = 500
MIN_PASSWORD_LENGTH = 6

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"
PLACEHOLDER_SHEETS_URL = "PASTE_YOUR_COPIED_APPS_SCRIPT_URL_HERE"
DEFAULT_SHEETS_URL_PREFIX = "https://script.google.com"
DEFAULT_REMOTE_TIMEOUT_SEC = 15.0

# Remote actions (GET ?action=...)
FETCH_ACTIONS = {
    "production": "getProduction",
    "off_days": "getOffDays",
    "logs": "getLogs",
    "users": "getUsers",
}

# Remote actions (POST {action, data, timestamp})
SAVE_ACTIONS = {
    "production": "saveProduction",
    "off_days": "saveOffDays",
    "logs": "saveLogs",
    "users": "saveUsers",
}
