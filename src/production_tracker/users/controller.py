from __future__ import annotations

from flask import Flask

from ..common.validators import require_role
from ..common.web import api_endpoint, fail, json_body, ok, public_user, require_session
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/session", methods=["POST"], endpoint="login")
    @api_endpoint
    def login():
        body = json_body()
        user = container.auth_service.login(body.get("username", ""), body.get("password", ""))
        return ok(user=public_user(user))

    @app.route("/api/session", methods=["GET"], endpoint="current_session")
    @api_endpoint
    def current_session():
        user = container.auth_service.current_user()
        if user is None:
            return fail("Not logged in", 401)
        return ok(user=public_user(user))

    @app.route("/api/session", methods=["DELETE"], endpoint="logout")
    @api_endpoint
    def logout():
        container.auth_service.logout()
        return ok()

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @api_endpoint
    def list_users():
        require_role(require_session(container), Role.ADMIN)
        return ok(users=[public_user(u) for u in container.user_service.list_users()])

    @app.route("/api/users", methods=["POST"], endpoint="add_user")
    @api_endpoint
    def add_user():
        actor = require_session(container)
        body = json_body()
        user = container.user_service.add_user(
            actor,
            name=body.get("name", ""),
            username=body.get("username", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
            role=body.get("role", Role.OPERATOR.value),
            category=body.get("category"),
        )
        return ok(201, user=public_user(user))

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @api_endpoint
    def delete_user(user_id: str):
        actor = require_session(container)
        removed = container.user_service.delete_user(actor, user_id)
        return ok(deleted=public_user(removed))

    @app.route("/api/users/me/password", methods=["POST"], endpoint="change_password")
    @api_endpoint
    def change_password():
        actor = require_session(container)
        body = json_body()
        container.user_service.change_password(
            actor,
            current_password=body.get("currentPassword", ""),
            new_password=body.get("newPassword", ""),
            confirm_password=body.get("confirmPassword", ""),
        )
        return ok()

    @app.route("/api/users/me/avatar", methods=["POST"], endpoint="set_avatar")
    @api_endpoint
    def set_avatar():
        actor = require_session(container)
        user = container.user_service.set_avatar(actor, json_body().get("avatar"))
        return ok(user=public_user(user))
