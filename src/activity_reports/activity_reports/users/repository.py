from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.fields import UNSET, Maybe
from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User (the identity store).

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_profile(
        self,
        user_id: int,
        *,
        now: datetime,
        email: Maybe[str] = UNSET,
        full_name: Maybe[str] = UNSET,
        password_hash: Maybe[str] = UNSET,
    ) -> Optional[User]:
        """Change only the supplied fields; ``None`` if the user is gone."""

        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError
