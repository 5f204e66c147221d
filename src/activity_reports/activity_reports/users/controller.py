from __future__ import annotations

from datetime import datetime

from flask import Flask, session

from ..common.fields import UNSET
from ..common.web import current_caller, json_body, login_required, ok
from ..core.enums import Role
from ..core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/health", methods=["GET"], endpoint="healthcheck")
    def healthcheck():
        return ok(status="ok", timestamp=datetime.now().isoformat())

    @app.route("/api/auth/register", methods=["POST"], endpoint="register_user")
    def register_user():
        payload = json_body()
        try:
            role = Role(payload.get("role") or Role.STAFF.value)
        except ValueError:
            raise ValidationError("role is not valid")

        # Self-registration creates staff accounts; other roles are an admin action.
        if role != Role.STAFF and session.get("role") != Role.ADMIN.value:
            raise PermissionDeniedError("only ADMIN users can create PIMPINAN or ADMIN accounts")

        user = container.user_service.register(
            username=payload.get("username", ""),
            email=payload.get("email", ""),
            password=payload.get("password", ""),
            full_name=payload.get("full_name", ""),
            role=role,
        )
        return ok(user.public_dict(), 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        payload = json_body()
        s_user = container.auth_service.authenticate(payload.get("username", ""), payload.get("password", ""))

        session.clear()
        session["user_id"] = s_user.user_id
        session["username"] = s_user.username
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        return ok(
            {
                "user_id": s_user.user_id,
                "username": s_user.username,
                "full_name": s_user.full_name,
                "role": s_user.role.value,
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @login_required
    def list_users():
        _, role = current_caller()
        users = container.user_service.list_users(current_role=role)
        return ok([u.public_dict() for u in users])

    @app.route("/api/users/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user_id, _ = current_caller()
        user = container.user_service.get_user(user_id)
        if not user:
            raise NotFoundError("user not found")
        return ok(user.public_dict())

    @app.route("/api/users/me", methods=["PATCH"], endpoint="update_profile")
    @login_required
    def update_profile():
        user_id, _ = current_caller()
        payload = json_body()
        user = container.user_service.update_profile(
            user_id,
            email=payload.get("email", UNSET),
            full_name=payload.get("full_name", UNSET),
            password=payload.get("password", UNSET),
        )
        session["name"] = user.full_name
        return ok(user.public_dict())
