from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_login(self, login: str) -> Optional[User]:
        """Look a user up by username or e-mail."""

        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def find_conflict(self, *, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> Optional[User]:
        """Another user already holding ``username`` or ``email``."""

        raise NotImplementedError

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def add(self, user: User) -> User:
        raise NotImplementedError

    def save(self, user: User) -> User:
        raise NotImplementedError

    def delete(self, user: User) -> None:
        """Remove ``user``; raises ConflictError while teaching records point at it."""

        raise NotImplementedError
