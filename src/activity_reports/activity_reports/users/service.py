from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import Clock, now_local
from ..common.fields import UNSET, Maybe, is_set
from ..common.validators import require_email, require_min_length, require_string, require_text
from ..core.constants import (
    EMAIL_MAX_LENGTH,
    FULL_NAME_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, PermissionDeniedError
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    username: str
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_string(username, "username")
        password = require_string(password, "password")

        user = self._users.get_by_username(username.strip())
        if not user:
            raise AuthenticationError("invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("invalid username or password")

        return SessionUser(user_id=user.id, username=user.username, full_name=user.full_name, role=user.role)


class UserService:
    """Use case: register users, edit profiles, list accounts."""

    def __init__(self, users: UserRepository, *, clock: Clock = now_local):
        self._users = users
        self._clock = clock

    def register(
        self,
        *,
        username: str,
        email: str,
        password: str,
        full_name: str,
        role: Role,
    ) -> User:
        username = require_text(username, "username", USERNAME_MAX_LENGTH)
        require_min_length(username, "username", USERNAME_MIN_LENGTH)
        email = require_email(email, "email", EMAIL_MAX_LENGTH)
        require_min_length(password, "password", PASSWORD_MIN_LENGTH)
        full_name = require_text(full_name, "full_name", FULL_NAME_MAX_LENGTH)

        if self._users.get_by_username(username):
            raise ConflictError("username is already taken")
        if self._users.get_by_email(email):
            raise ConflictError("email is already registered")

        user = self._users.create_user(
            username=username,
            email=email,
            password_hash=generate_password_hash(password),
            full_name=full_name,
            role=Role(role),
            now=self._clock(),
        )
        logger.info("registered user %s (id=%s, role=%s)", user.username, user.id, user.role.value)
        return user

    def update_profile(
        self,
        user_id: int,
        *,
        email: Maybe[str] = UNSET,
        full_name: Maybe[str] = UNSET,
        password: Maybe[str] = UNSET,
    ) -> User:
        current = self._users.get_by_id(int(user_id))
        if not current:
            raise NotFoundError(f"user with id {user_id} not found")

        password_hash: Maybe[str] = UNSET
        if is_set(email):
            email = require_email(email, "email", EMAIL_MAX_LENGTH)
            other = self._users.get_by_email(email)
            if other and other.id != current.id:
                raise ConflictError("email is already registered")
        if is_set(full_name):
            full_name = require_text(full_name, "full_name", FULL_NAME_MAX_LENGTH)
        if is_set(password):
            require_min_length(password, "password", PASSWORD_MIN_LENGTH)
            password_hash = generate_password_hash(password)

        updated = self._users.update_profile(
            current.id,
            now=self._clock(),
            email=email,
            full_name=full_name,
            password_hash=password_hash,
        )
        if not updated:
            raise NotFoundError(f"user with id {user_id} not found")
        return updated

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get_by_id(int(user_id))

    def list_users(self, *, current_role: Role) -> Sequence[User]:
        if current_role != Role.ADMIN:
            raise PermissionDeniedError("only ADMIN users can list accounts")
        return self._users.list_all()
