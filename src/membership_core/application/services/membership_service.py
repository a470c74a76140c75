"""Application service for user credential lifecycle operations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from membership_core.application.ports.hashing_strategy_port import HashingStrategyPort
from membership_core.application.ports.user_store_port import (
    DuplicateUserError,
    UserRecord,
    UserStorePort,
)
from membership_core.application.services.credential_hasher import CredentialHasher
from membership_core.domain.auth.credentials import (
    normalize_username,
    require_value,
)
from membership_core.domain.auth.reset_token import (
    RESET_TOKEN_DEFAULT_ITERATIONS,
    derive_reset_token,
)
from membership_core.domain.auth.validation_result import ValidationResult

logger = logging.getLogger(__name__)

_EMPTY_USER_ID = UUID(int=0)


@dataclass(frozen=True)
class UserSummary:
    """Read-only user projection without password material."""

    user_id: UUID
    username: str
    name: str
    surname: str
    email: str


class MembershipService:
    """Validate, create, update and delete users against a user store."""

    def __init__(
        self,
        *,
        users: UserStorePort,
        password_strategy: HashingStrategyPort,
        legacy_password_strategies: Sequence[HashingStrategyPort] = (),
        reset_token_iterations: int = RESET_TOKEN_DEFAULT_ITERATIONS,
    ) -> None:
        self._users = users
        self._credential_hasher = CredentialHasher(
            current=password_strategy,
            legacy=legacy_password_strategies,
            on_password_verified=self._upgrade_password_hash,
        )
        self._reset_token_iterations = reset_token_iterations
        self._dummy_salt = self._credential_hasher.generate_salt()

    def is_read_only(self) -> bool:
        """Return whether this membership backend rejects writes."""

        return False

    async def validate_user(self, *, username: str, password: str) -> ValidationResult:
        """Check one username/password pair without revealing whether the user exists."""

        require_value(username, argument="username")
        require_value(password, argument="password")

        user = await self._users.get_by_username(username=normalize_username(username))
        if user is None:
            # Equalize response time with the existing-user path.
            self._credential_hasher.hash_password(password, self._dummy_salt)
            return ValidationResult.FAILURE

        is_valid = await self._credential_hasher.compare(
            password=password,
            username=user.username,
            salt=user.password_salt,
            stored_hash=user.password_hash,
        )
        return ValidationResult.SUCCESS if is_valid else ValidationResult.FAILURE

    async def create_user(
        self,
        *,
        username: str,
        password: str,
        name: str,
        surname: str,
        email: str,
        user_id: UUID | None = None,
    ) -> bool:
        """Create one user and return False when the username is already taken."""

        require_value(username, argument="username")
        require_value(password, argument="password")
        require_value(name, argument="name")
        require_value(surname, argument="surname")
        require_value(email, argument="email")
        if user_id is None or user_id == _EMPTY_USER_ID:
            user_id = uuid4()

        salt, password_hash = self._credential_hasher.derive_credentials(password)
        record = UserRecord(
            user_id=user_id,
            username=normalize_username(username),
            name=name,
            surname=surname,
            email=email,
            password_hash=password_hash,
            password_salt=salt,
        )
        try:
            await self._users.insert_user(record)
        except DuplicateUserError:
            logger.info("user_create_rejected_duplicate username=%s", record.username)
            return False

        logger.info("user_created user_id=%s username=%s", record.user_id, record.username)
        return True

    async def get_all_users(self) -> list[UserSummary]:
        """Return every user ordered by username."""

        return [_to_summary(user) for user in await self._users.list_users()]

    async def user_count(self) -> int:
        """Return the number of stored users."""

        return await self._users.count_users()

    async def get_user_model_by_id(self, *, user_id: UUID) -> UserSummary | None:
        """Return user summary by id or None."""

        user = await self._users.get_by_id(user_id=user_id)
        return _to_summary(user) if user is not None else None

    async def get_user_model_by_username(self, *, username: str) -> UserSummary | None:
        """Return user summary by case-insensitive username or None."""

        user = await self._users.get_by_username(username=normalize_username(username))
        return _to_summary(user) if user is not None else None

    async def update_user(
        self,
        *,
        user_id: UUID,
        username: str | None = None,
        name: str | None = None,
        surname: str | None = None,
        email: str | None = None,
        password: str | None = None,
    ) -> None:
        """Overwrite provided fields of one user.

        None leaves a field unchanged; an empty name, surname or email does too.
        """

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            return

        if username is not None:
            user = replace(
                user,
                username=normalize_username(require_value(username, argument="username")),
            )
        if name:
            user = replace(user, name=name)
        if surname:
            user = replace(user, surname=surname)
        if email:
            user = replace(user, email=email)
        if password is not None:
            salt, password_hash = self._credential_hasher.derive_credentials(password)
            user = replace(user, password_salt=salt, password_hash=password_hash)

        await self._users.save_user(user)
        logger.info(
            "user_updated user_id=%s password_changed=%s",
            user_id,
            password is not None,
        )

    async def delete_user(self, *, user_id: UUID) -> None:
        """Sever one user's associations and remove the record."""

        user = await self._users.get_by_id(user_id=user_id)
        if user is None:
            return

        await self._users.clear_administered_repositories(user_id=user_id)
        await self._users.clear_roles(user_id=user_id)
        await self._users.clear_repository_access(user_id=user_id)
        await self._users.clear_team_memberships(user_id=user_id)
        await self._users.remove_user(user_id=user_id)
        logger.info("user_deleted user_id=%s", user_id)

    def generate_reset_token(self, *, username: str) -> str:
        """Return a fresh base64 reset token derived from username."""

        require_value(username, argument="username")
        return derive_reset_token(
            username=normalize_username(username),
            iterations=self._reset_token_iterations,
        )

    async def _upgrade_password_hash(self, username: str, password: str) -> None:
        """Re-persist a verified password under the current hashing strategy."""

        user = await self._users.get_by_username(username=normalize_username(username))
        if user is None:
            return
        # The stored credential may have been rotated since verification.
        if not self._credential_hasher.matches(password, user.password_salt, user.password_hash):
            logger.info("password_hash_upgrade_skipped user_id=%s", user.user_id)
            return

        salt, password_hash = self._credential_hasher.derive_credentials(password)
        await self._users.save_user(
            replace(user, password_salt=salt, password_hash=password_hash)
        )
        logger.info(
            "password_hash_upgraded user_id=%s scheme=%s",
            user.user_id,
            self._credential_hasher.scheme,
        )


def _to_summary(user: UserRecord) -> UserSummary:
    return UserSummary(
        user_id=user.user_id,
        username=user.username,
        name=user.name,
        surname=user.surname,
        email=user.email,
    )
