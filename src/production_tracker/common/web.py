"""Helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import current_app, jsonify, request

from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError
from ..storage.codec import encode

logger = logging.getLogger(__name__)


def ok(status: int = 200, **payload):
    return jsonify({"ok": True, **payload}), status


def fail(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def public_user(user) -> Optional[dict]:
    if user is None:
        return None
    data = encode(user)
    data.pop("password", None)
    return data


def api_endpoint(view):
    """Turn domain errors into ``{"ok": false, "error": ...}`` responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except AuthenticationError as e:
            return fail(str(e), 401)
        except AuthorizationError as e:
            return fail(str(e), 403)
        except DomainError as e:
            return fail(str(e), 400)
        except Exception as e:
            logger.exception("Unhandled error in %s", view.__name__)
            if bool(current_app.config.get("DEBUG", False)):
                return fail(f"System error: {e}", 500)
            return fail("System error", 500)

    return wrapper


def require_session(container: Any):
    user = container.auth_service.current_user()
    if user is None:
        raise AuthenticationError("Please log in to continue")
    return user
