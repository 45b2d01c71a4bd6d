from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..common.events import Notification
from ..common.validators import parse_enum, require_choice, require_min_length, require_non_empty, require_role
from ..core.constants import CATEGORIES, MIN_PASSWORD_LENGTH
from ..core.enums import LogAction, NotificationLevel, Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..storage.codec import new_record_id
from ..storage.service import StorageService
from .model import User


class AuthService:
    """Use case: log in / log out against the stored user list.

    This only selects the acting user; it is not an access-control system.
    """

    def __init__(self, storage: StorageService):
        self._storage = storage

    def login(self, username: str, password: str) -> User:
        key = (username or "").strip().lower()
        user = next((u for u in self._storage.get_users() if u.username.lower() == key), None)
        if not user or user.password != (password or ""):
            raise AuthenticationError("Invalid username or password")

        self._storage.set_session(user)
        return user

    def logout(self) -> None:
        self._storage.set_session(None)

    def current_user(self) -> Optional[User]:
        return self._storage.get_session()


class UserService:
    """Use case: manage accounts (admin) and the caller's own profile."""

    def __init__(self, storage: StorageService):
        self._storage = storage

    def _notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        self._storage.events.publish(Notification(message=message, level=level))

    def _log(self, actor: User, action: LogAction, details: str) -> None:
        self._storage.add_log(user_id=actor.user_id, user_name=actor.name, action=action, details=details)

    def list_users(self) -> list[User]:
        return self._storage.get_users()

    def add_user(
        self,
        actor: User,
        *,
        name: str,
        username: str,
        email: str = "",
        password: str,
        role: Role | str = Role.OPERATOR,
        category: Optional[str] = None,
    ) -> User:
        require_role(actor, Role.ADMIN)
        name = require_non_empty(name, "Name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        role = parse_enum(Role, role, "Role")
        if category:
            category = require_choice(category, "Department", CATEGORIES)

        users = self._storage.get_users()
        if any(u.username.lower() == username.lower() for u in users):
            raise ValidationError("Username already exists")

        user = User(
            user_id=new_record_id(),
            name=name,
            username=username,
            email=(email or "").strip(),
            role=role,
            category=category or None,
            password=password,
        )
        self._storage.save_users([*users, user])
        self._log(actor, LogAction.ADD_USER, f"Created user: {user.name} [{user.role.value}] ({user.category or 'All Depts'})")
        self._notify(f"NEW USER CREATED: {user.name.upper()}")
        return user

    def delete_user(self, actor: User, user_id: str) -> User:
        require_role(actor, Role.ADMIN)

        users = self._storage.get_users()
        target = next((u for u in users if u.user_id == str(user_id)), None)
        if not target:
            raise ValidationError("User not found")
        if target.role == Role.ADMIN and sum(1 for u in users if u.role == Role.ADMIN) <= 1:
            raise ValidationError("Cannot delete the last admin account")

        self._storage.save_users([u for u in users if u.user_id != target.user_id])
        self._log(actor, LogAction.DELETE_USER, f"Deleted user: {target.name} ({target.username})")
        self._notify(f"USER REMOVED: {target.name.upper()}", NotificationLevel.INFO)
        return target

    def _replace_self(self, actor: User, **changes) -> User:
        users = self._storage.get_users()
        current = next((u for u in users if u.user_id == actor.user_id), None)
        if current is None:
            raise ValidationError("User not found")
        updated = replace(current, **changes)

        self._storage.save_users([updated if u.user_id == updated.user_id else u for u in users])
        self._storage.set_session(updated)
        return updated

    def change_password(self, actor: User, *, current_password: str, new_password: str, confirm_password: str) -> User:
        if actor is None:
            raise AuthenticationError("Please log in to continue")
        if new_password != confirm_password:
            raise ValidationError("New passwords do not match")

        stored = next((u for u in self._storage.get_users() if u.user_id == actor.user_id), None)
        if stored is None:
            raise ValidationError("User not found")
        if stored.password != current_password:
            raise ValidationError("Incorrect current password")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        updated = self._replace_self(actor, password=new_password)
        self._log(actor, LogAction.CHANGE_PASSWORD, "User successfully updated their account password")
        self._notify("PASSWORD UPDATED SUCCESSFULLY")
        return updated

    def set_avatar(self, actor: User, avatar: Optional[str]) -> User:
        if actor is None:
            raise AuthenticationError("Please log in to continue")
        return self._replace_self(actor, avatar=(avatar or None))
