from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for permission checks."""

    ADMIN = "admin"
    MANAGER = "manager"
    PLANNER = "planner"
    OPERATOR = "operator"


class Unit(str, Enum):
    """Units a production quantity can be recorded in."""

    KG = "KG"
    PCS = "PCS"
    CARTON = "CARTON"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class LogAction(str, Enum):
    """Action tags written to the activity log."""

    CREATE_PLAN = "CREATE_PLAN"
    RECORD_ACTUAL = "RECORD_ACTUAL"
    EDIT_RECORD = "EDIT_RECORD"
    DELETE_RECORD = "DELETE_RECORD"
    ADD_HOLIDAY = "ADD_HOLIDAY"
    DELETE_HOLIDAY = "DELETE_HOLIDAY"
    ADD_USER = "ADD_USER"
    DELETE_USER = "DELETE_USER"
    CHANGE_PASSWORD = "CHANGE_PASSWORD"
