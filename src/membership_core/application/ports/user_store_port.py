"""Port for user persistence operations used by the membership service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


class DuplicateUserError(Exception):
    """Raised when a write would violate a user uniqueness constraint."""


@dataclass(frozen=True)
class UserRecord:
    """User persistence model."""

    user_id: UUID
    username: str
    name: str
    surname: str
    email: str
    password_hash: str
    password_salt: str


class UserStorePort(Protocol):
    """User store contract."""

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by already-normalized username or None."""

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

    async def insert_user(self, record: UserRecord) -> None:
        """Insert a new user or raise DuplicateUserError."""

    async def save_user(self, record: UserRecord) -> None:
        """Overwrite stored fields of an existing user."""

    async def remove_user(self, *, user_id: UUID) -> None:
        """Delete the user row."""

    async def list_users(self) -> list[UserRecord]:
        """Return every user ordered by username."""

    async def count_users(self) -> int:
        """Return the number of stored users."""

    async def clear_administered_repositories(self, *, user_id: UUID) -> None:
        """Drop repository-administrator links for one user."""

    async def clear_roles(self, *, user_id: UUID) -> None:
        """Drop role assignments for one user."""

    async def clear_repository_access(self, *, user_id: UUID) -> None:
        """Drop repository permission links for one user."""

    async def clear_team_memberships(self, *, user_id: UUID) -> None:
        """Drop team memberships for one user."""
