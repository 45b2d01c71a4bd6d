from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .datetime_utils import date_only, is_iso_date


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str | None, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_iso_date(value: str | None, field_name: str = "Date") -> str:
    cleaned = date_only(value)
    if not is_iso_date(cleaned):
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")
    return cleaned


def require_quantity(value: object, field_name: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if number != number or number < 0:
        raise ValidationError(f"{field_name} must be zero or more")
    return int(number) if number.is_integer() else number


def require_choice(value: str | None, field_name: str, choices) -> str:
    if value not in choices:
        raise ValidationError(f"{field_name} must be one of: {', '.join(choices)}")
    return value


def require_role(actor, *roles: Role, message: str = "You do not have permission for this action"):
    if actor is None:
        raise AuthorizationError("Please log in to continue")
    if actor.role not in roles:
        raise AuthorizationError(message)
    return actor


def parse_enum(enum_type, value, field_name: str):
    if isinstance(value, enum_type):
        return value
    text = str(value or "").strip()
    for candidate in (text, text.lower(), text.upper()):
        try:
            return enum_type(candidate)
        except ValueError:
            continue
    raise ValidationError(f"{field_name} is not valid")
