"""Bootstrap helper for creating an initial admin account at startup."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from membership_core.domain.auth.credentials import normalize_username


class AdminBootstrapConfigError(ValueError):
    """Raised when bootstrap-admin environment configuration is invalid."""


@dataclass(frozen=True)
class AdminBootstrapConfig:
    """Runtime configuration for one-time admin bootstrap."""

    username: str
    password: str
    name: str
    surname: str
    email: str


class AdminBootstrapOutcome(StrEnum):
    """Outcome states for initial admin bootstrap execution."""

    CREATED = "created"
    SKIPPED_USERS_PRESENT = "skipped_users_present"
    SKIPPED_CONCURRENT_INSERT = "skipped_concurrent_insert"


@dataclass(frozen=True)
class AdminBootstrapResult:
    """Result model for one initial-admin bootstrap attempt."""

    outcome: AdminBootstrapOutcome
    username: str


class UserCreatorPort(Protocol):
    """Membership operations needed to seed the first account."""

    async def user_count(self) -> int:
        """Return the number of stored users."""

    async def create_user(
        self,
        *,
        username: str,
        password: str,
        name: str,
        surname: str,
        email: str,
    ) -> bool:
        """Create one user and return False when the username is taken."""


def resolve_admin_bootstrap_config(
    *,
    username: str | None,
    password: str | None,
    password_file: str | None,
    email: str | None,
    name: str = "Administrator",
    surname: str = "Administrator",
) -> AdminBootstrapConfig | None:
    """Resolve bootstrap-admin config from env values or return None when disabled."""

    any_value_set = any(value is not None for value in (username, password, password_file, email))
    if username is None:
        if any_value_set:
            raise AdminBootstrapConfigError(
                "BOOTSTRAP_ADMIN_USERNAME is required when bootstrap-admin variables are set"
            )
        return None

    if password is not None and password_file is not None:
        raise AdminBootstrapConfigError(
            "set only one of BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE"
        )

    resolved_password: str | None = None
    if password_file is not None:
        path = Path(password_file)
        try:
            resolved_password = path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise AdminBootstrapConfigError(
                "failed to read BOOTSTRAP_ADMIN_PASSWORD_FILE"
            ) from exc
    elif password is not None:
        resolved_password = password

    if resolved_password is None:
        raise AdminBootstrapConfigError(
            "set BOOTSTRAP_ADMIN_PASSWORD or BOOTSTRAP_ADMIN_PASSWORD_FILE "
            "when BOOTSTRAP_ADMIN_USERNAME is set"
        )
    if not resolved_password:
        raise AdminBootstrapConfigError("bootstrap admin password cannot be blank")
    if not username.strip():
        raise AdminBootstrapConfigError("BOOTSTRAP_ADMIN_USERNAME cannot be blank")
    if email is None or not email.strip():
        raise AdminBootstrapConfigError(
            "BOOTSTRAP_ADMIN_EMAIL is required when BOOTSTRAP_ADMIN_USERNAME is set"
        )

    return AdminBootstrapConfig(
        username=normalize_username(username.strip()),
        password=resolved_password,
        name=name,
        surname=surname,
        email=email.strip(),
    )


async def ensure_initial_admin_user(
    *,
    membership: UserCreatorPort,
    config: AdminBootstrapConfig,
) -> AdminBootstrapResult:
    """Create the initial admin user when the user store is empty, otherwise skip."""

    if await membership.user_count() > 0:
        return AdminBootstrapResult(
            outcome=AdminBootstrapOutcome.SKIPPED_USERS_PRESENT,
            username=config.username,
        )

    created = await membership.create_user(
        username=config.username,
        password=config.password,
        name=config.name,
        surname=config.surname,
        email=config.email,
    )
    if not created:
        return AdminBootstrapResult(
            outcome=AdminBootstrapOutcome.SKIPPED_CONCURRENT_INSERT,
            username=config.username,
        )

    return AdminBootstrapResult(outcome=AdminBootstrapOutcome.CREATED, username=config.username)
