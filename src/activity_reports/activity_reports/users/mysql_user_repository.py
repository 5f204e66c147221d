from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.fields import UNSET, Maybe, is_set
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "id, username, email, password_hash, full_name, role, created_at, updated_at"


def _to_user(row: dict) -> User:
    return User(
        id=int(row["id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        full_name=row["full_name"],
        role=Role(row["role"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {column}=%s", (value,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("id", int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        return self._get_one("username", username)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("email", email)

    def create_user(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        full_name: str,
        role: Role,
        now: datetime,
    ) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(username, email, password_hash, full_name, role, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (username, email, password_hash, full_name, role.value, now, now),
            )
            user_id = int(cur.lastrowid)
        return User(
            id=user_id,
            username=username,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            role=role,
            created_at=now,
            updated_at=now,
        )

    def update_profile(
        self,
        user_id: int,
        *,
        now: datetime,
        email: Maybe[str] = UNSET,
        full_name: Maybe[str] = UNSET,
        password_hash: Maybe[str] = UNSET,
    ) -> Optional[User]:
        assignments = ["updated_at=%s"]
        params: list[object] = [now]
        for column, value in (("email", email), ("full_name", full_name), ("password_hash", password_hash)):
            if is_set(value):
                assignments.append(f"{column}=%s")
                params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE users SET {', '.join(assignments)} WHERE id=%s",
                tuple(params + [int(user_id)]),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY username ASC")
            return [_to_user(r) for r in fetchall(cur)]
