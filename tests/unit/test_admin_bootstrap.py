from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from membership_core.application.services.admin_bootstrap import (
    AdminBootstrapConfig,
    AdminBootstrapConfigError,
    AdminBootstrapOutcome,
    ensure_initial_admin_user,
    resolve_admin_bootstrap_config,
)


@dataclass
class FakeMembership:
    existing_users: int = 0
    accept_create: bool = True
    created: list[dict[str, str]] = field(default_factory=list)

    async def user_count(self) -> int:
        return self.existing_users

    async def create_user(
        self,
        *,
        username: str,
        password: str,
        name: str,
        surname: str,
        email: str,
    ) -> bool:
        self.created.append(
            {
                "username": username,
                "password": password,
                "name": name,
                "surname": surname,
                "email": email,
            }
        )
        return self.accept_create


def _config() -> AdminBootstrapConfig:
    return AdminBootstrapConfig(
        username="admin",
        password="secret",
        name="Administrator",
        surname="Administrator",
        email="admin@example.org",
    )


def test_resolve_returns_none_when_nothing_is_configured() -> None:
    assert (
        resolve_admin_bootstrap_config(
            username=None,
            password=None,
            password_file=None,
            email=None,
        )
        is None
    )


def test_resolve_normalizes_username_and_reads_inline_password() -> None:
    config = resolve_admin_bootstrap_config(
        username=" Admin ",
        password="secret",
        password_file=None,
        email="admin@example.org",
    )

    assert config == _config()


def test_resolve_reads_password_file(tmp_path: Path) -> None:
    password_file = tmp_path / "admin_password"
    password_file.write_text("from-file\n", encoding="utf-8")

    config = resolve_admin_bootstrap_config(
        username="admin",
        password=None,
        password_file=str(password_file),
        email="admin@example.org",
    )

    assert config is not None
    assert config.password == "from-file"


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        (
            {"username": None, "password": "x", "password_file": None, "email": None},
            "BOOTSTRAP_ADMIN_USERNAME is required",
        ),
        (
            {"username": "admin", "password": "x", "password_file": "/tmp/x", "email": "a@x"},
            "set only one of",
        ),
        (
            {"username": "admin", "password": None, "password_file": None, "email": "a@x"},
            "set BOOTSTRAP_ADMIN_PASSWORD",
        ),
        (
            {"username": "admin", "password": "x", "password_file": None, "email": None},
            "BOOTSTRAP_ADMIN_EMAIL is required",
        ),
        (
            {"username": "   ", "password": "x", "password_file": None, "email": "a@x"},
            "cannot be blank",
        ),
    ],
)
def test_resolve_rejects_inconsistent_configuration(
    kwargs: dict[str, str | None],
    message: str,
) -> None:
    with pytest.raises(AdminBootstrapConfigError, match=message):
        resolve_admin_bootstrap_config(**kwargs)


def test_resolve_rejects_unreadable_password_file(tmp_path: Path) -> None:
    with pytest.raises(AdminBootstrapConfigError, match="failed to read"):
        resolve_admin_bootstrap_config(
            username="admin",
            password=None,
            password_file=str(tmp_path / "missing"),
            email="admin@example.org",
        )


@pytest.mark.asyncio
async def test_bootstrap_creates_first_user_when_store_is_empty() -> None:
    membership = FakeMembership()

    result = await ensure_initial_admin_user(membership=membership, config=_config())

    assert result.outcome is AdminBootstrapOutcome.CREATED
    assert result.username == "admin"
    assert membership.created == [
        {
            "username": "admin",
            "password": "secret",
            "name": "Administrator",
            "surname": "Administrator",
            "email": "admin@example.org",
        }
    ]


@pytest.mark.asyncio
async def test_bootstrap_skips_when_users_exist() -> None:
    membership = FakeMembership(existing_users=3)

    result = await ensure_initial_admin_user(membership=membership, config=_config())

    assert result.outcome is AdminBootstrapOutcome.SKIPPED_USERS_PRESENT
    assert membership.created == []


@pytest.mark.asyncio
async def test_bootstrap_reports_concurrent_insert_when_create_is_rejected() -> None:
    membership = FakeMembership(accept_create=False)

    result = await ensure_initial_admin_user(membership=membership, config=_config())

    assert result.outcome is AdminBootstrapOutcome.SKIPPED_CONCURRENT_INSERT
