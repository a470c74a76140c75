"""SQLAlchemy adapter for user persistence and association cleanup."""

from __future__ import annotations

from typing import cast
from uuid import UUID

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from membership_core.application.ports.user_store_port import (
    DuplicateUserError,
    UserRecord,
    UserStorePort,
)
from membership_core.infrastructure.db.metadata import (
    repository_administrators,
    repository_users,
    team_members,
    user_roles,
    users,
)

_USER_COLUMNS = (
    users.c.id,
    users.c.username,
    users.c.name,
    users.c.surname,
    users.c.email,
    users.c.password_hash,
    users.c.password_salt,
)


def _is_duplicate_user_error(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class SqlAlchemyUserStore(UserStorePort):
    """User store backed by SQLAlchemy async sessions."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_by_username(self, *, username: str) -> UserRecord | None:
        """Return user by already-normalized username or None."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.username == username).limit(1)
        return await self._fetch_one(statement)

    async def get_by_id(self, *, user_id: UUID) -> UserRecord | None:
        """Return user by id or None."""

        statement = sa.select(*_USER_COLUMNS).where(users.c.id == user_id).limit(1)
        return await self._fetch_one(statement)

    async def insert_user(self, record: UserRecord) -> None:
        """Insert a new user or raise DuplicateUserError."""

        statement = sa.insert(users).values(
            id=record.user_id,
            username=record.username,
            name=record.name,
            surname=record.surname,
            email=record.email,
            password_hash=record.password_hash,
            password_salt=record.password_salt,
        )
        await self._execute_write(statement)

    async def save_user(self, record: UserRecord) -> None:
        """Overwrite stored fields of an existing user."""

        statement = (
            sa.update(users)
            .where(users.c.id == record.user_id)
            .values(
                username=record.username,
                name=record.name,
                surname=record.surname,
                email=record.email,
                password_hash=record.password_hash,
                password_salt=record.password_salt,
                updated_at=sa.func.current_timestamp(),
            )
        )
        await self._execute_write(statement)

    async def remove_user(self, *, user_id: UUID) -> None:
        """Delete the user row."""

        await self._execute_write(sa.delete(users).where(users.c.id == user_id))

    async def list_users(self) -> list[UserRecord]:
        """Return every user ordered by username."""

        statement = sa.select(*_USER_COLUMNS).order_by(users.c.username.asc())

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return [_to_user_record(row) for row in result.mappings().all()]

    async def count_users(self) -> int:
        """Return the number of stored users."""

        statement = sa.select(sa.func.count()).select_from(users)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        return int(result.scalar_one())

    async def clear_administered_repositories(self, *, user_id: UUID) -> None:
        """Drop repository-administrator links for one user."""

        await self._execute_write(
            sa.delete(repository_administrators).where(
                repository_administrators.c.user_id == user_id
            )
        )

    async def clear_roles(self, *, user_id: UUID) -> None:
        """Drop role assignments for one user."""

        await self._execute_write(sa.delete(user_roles).where(user_roles.c.user_id == user_id))

    async def clear_repository_access(self, *, user_id: UUID) -> None:
        """Drop repository permission links for one user."""

        await self._execute_write(
            sa.delete(repository_users).where(repository_users.c.user_id == user_id)
        )

    async def clear_team_memberships(self, *, user_id: UUID) -> None:
        """Drop team memberships for one user."""

        await self._execute_write(
            sa.delete(team_members).where(team_members.c.user_id == user_id)
        )

    async def _fetch_one(self, statement: sa.Select) -> UserRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return _to_user_record(row)

    async def _execute_write(self, statement: sa.Executable) -> None:
        async with self._session_factory() as session:
            try:
                await session.execute(statement)
                await session.commit()
            except IntegrityError as error:
                await session.rollback()
                if _is_duplicate_user_error(error):
                    raise DuplicateUserError("Duplicate user username or id") from error
                raise


def _to_user_record(row: sa.RowMapping) -> UserRecord:
    raw_user_id = row["id"]
    user_id = raw_user_id if isinstance(raw_user_id, UUID) else UUID(str(raw_user_id))
    return UserRecord(
        user_id=user_id,
        username=cast(str, row["username"]),
        name=cast(str, row["name"]),
        surname=cast(str, row["surname"]),
        email=cast(str, row["email"]),
        password_hash=cast(str, row["password_hash"]),
        password_salt=cast(str, row["password_salt"]),
    )
