from __future__ import annotations

import pytest

from production_tracker.common.events import Notification
from production_tracker.core.enums import Role
from production_tracker.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from production_tracker.storage.backend import InMemoryBackend
from production_tracker.storage.service import StorageService
from production_tracker.users.service import AuthService, UserService


@pytest.fixture
def storage():
    service = StorageService(InMemoryBackend()).open()
    yield service
    service.close()


def _user(storage, username):
    return next(u for u in storage.get_users() if u.username == username)


def test_login_is_case_insensitive_and_caches_session(storage):
    auth = AuthService(storage)

    user = auth.login("ADMIN", "password123")

    assert user.user_id == "u1"
    assert auth.current_user() == user

    auth.logout()
    assert auth.current_user() is None


def test_login_rejects_bad_credentials(storage):
    auth = AuthService(storage)
    with pytest.raises(AuthenticationError):
        auth.login("admin", "wrong")
    with pytest.raises(AuthenticationError):
        auth.login("nobody", "password123")
    assert auth.current_user() is None


def test_add_user_requires_admin(storage):
    service = UserService(storage)
    with pytest.raises(AuthorizationError):
        service.add_user(_user(storage, "manager"), name="X", username="x", password="secret1")


def test_add_user_validates_and_logs(storage):
    service = UserService(storage)
    admin = _user(storage, "admin")
    notes = []
    storage.events.subscribe(Notification, notes.append)

    with pytest.raises(ValidationError):
        service.add_user(admin, name="Dup", username="Operator", password="secret1")
    with pytest.raises(ValidationError):
        service.add_user(admin, name="Short", username="short", password="123")
    with pytest.raises(ValidationError):
        service.add_user(admin, name="Bad", username="bad", password="secret1", role="owner")

    user = service.add_user(
        admin,
        name="Line Lead",
        username="lead",
        email="lead@example.com",
        password="secret1",
        role="manager",
        category="Cosmetic",
    )

    assert user.role == Role.MANAGER
    assert _user(storage, "lead") == user
    assert storage.get_logs()[0].action == "ADD_USER"
    assert notes[-1].message == "NEW USER CREATED: LINE LEAD"


def test_delete_user_protects_last_admin(storage):
    service = UserService(storage)
    admin = _user(storage, "admin")

    with pytest.raises(ValidationError):
        service.delete_user(admin, "u1")

    removed = service.delete_user(admin, "u5")
    assert removed.username == "operator2"
    assert "operator2" not in {u.username for u in storage.get_users()}
    assert storage.get_logs()[0].action == "DELETE_USER"

    with pytest.raises(ValidationError):
        service.delete_user(admin, "u5")


def test_change_password_rules_and_session_refresh(storage):
    auth, service = AuthService(storage), UserService(storage)
    actor = auth.login("planner", "password123")

    with pytest.raises(ValidationError, match="do not match"):
        service.change_password(actor, current_password="password123", new_password="abcdef", confirm_password="abcdeg")
    with pytest.raises(ValidationError, match="Incorrect"):
        service.change_password(actor, current_password="nope", new_password="abcdef", confirm_password="abcdef")
    with pytest.raises(ValidationError, match="at least 6"):
        service.change_password(actor, current_password="password123", new_password="abc", confirm_password="abc")

    updated = service.change_password(
        actor, current_password="password123", new_password="abcdef", confirm_password="abcdef"
    )

    assert updated.password == "abcdef"
    assert auth.current_user() == updated
    assert storage.get_logs()[0].action == "CHANGE_PASSWORD"
    assert auth.login("planner", "abcdef").user_id == actor.user_id


def test_set_avatar_updates_user_and_session(storage):
    auth, service = AuthService(storage), UserService(storage)
    actor = auth.login("operator", "password123")

    updated = service.set_avatar(actor, "https://example.com/a.png")

    assert _user(storage, "operator").avatar == "https://example.com/a.png"
    assert auth.current_user() == updated

    assert service.set_avatar(updated, "").avatar is None


def test_self_service_changes_fail_when_account_no_longer_stored(storage):
    auth, service = AuthService(storage), UserService(storage)
    actor = auth.login("operator", "password123")
    storage.save_users([u for u in storage.get_users() if u.user_id != actor.user_id])

    with pytest.raises(ValidationError, match="User not found"):
        service.change_password(actor, current_password="password123", new_password="abcdef", confirm_password="abcdef")
    with pytest.raises(ValidationError, match="User not found"):
        service.set_avatar(actor, "https://example.com/a.png")

    assert auth.current_user() == actor
    assert actor.user_id not in {u.user_id for u in storage.get_users()}
