from __future__ import annotations

from pathlib import Path
from uuid import UUID, uuid4

import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from membership_core.application.ports.user_store_port import DuplicateUserError, UserRecord
from membership_core.infrastructure.db.session import create_session_factory
from membership_core.infrastructure.db.user_store import SqlAlchemyUserStore

REPO_ROOT = Path(__file__).resolve().parents[2]


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config(str(REPO_ROOT / "alembic.ini"))
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _record(*, username: str, user_id: UUID | None = None) -> UserRecord:
    return UserRecord(
        user_id=user_id or uuid4(),
        username=username,
        name="Given",
        surname="Family",
        email=f"{username}@example.org",
        password_hash=f"hash-{username}",
        password_salt=f"salt-{username}",
    )


def _link_associations(connection: sa.Connection, *, user_id: UUID) -> None:
    role_id, team_id, repository_id = uuid4(), uuid4(), uuid4()
    statements = [
        ("INSERT INTO roles (id, name) VALUES (:id, 'Administrator')", {"id": role_id.hex}),
        ("INSERT INTO teams (id, name) VALUES (:id, 'core')", {"id": team_id.hex}),
        ("INSERT INTO repositories (id, name) VALUES (:id, 'repo')", {"id": repository_id.hex}),
        (
            "INSERT INTO user_roles (user_id, role_id) VALUES (:user_id, :other_id)",
            {"user_id": user_id.hex, "other_id": role_id.hex},
        ),
        (
            "INSERT INTO team_members (user_id, team_id) VALUES (:user_id, :other_id)",
            {"user_id": user_id.hex, "other_id": team_id.hex},
        ),
        (
            "INSERT INTO repository_users (user_id, repository_id) "
            "VALUES (:user_id, :other_id)",
            {"user_id": user_id.hex, "other_id": repository_id.hex},
        ),
        (
            "INSERT INTO repository_administrators (user_id, repository_id) "
            "VALUES (:user_id, :other_id)",
            {"user_id": user_id.hex, "other_id": repository_id.hex},
        ),
    ]
    for statement, params in statements:
        connection.execute(sa.text(statement), params)


def _association_count(connection: sa.Connection, table: str) -> int:
    return int(connection.execute(sa.text(f"SELECT COUNT(*) FROM {table}")).scalar_one())


def test_migration_creates_membership_tables(tmp_path: Path) -> None:
    sync_url, _ = _upgrade_head(tmp_path, "schema.db")

    inspector = sa.inspect(sa.create_engine(sync_url))

    assert {
        "users",
        "roles",
        "teams",
        "repositories",
        "user_roles",
        "team_members",
        "repository_users",
        "repository_administrators",
    } <= set(inspector.get_table_names())
    user_columns = {column["name"] for column in inspector.get_columns("users")}
    assert {"id", "username", "password_hash", "password_salt"} <= user_columns


@pytest.mark.asyncio
async def test_insert_and_lookup_round_trip(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "lookup.db")
    store = SqlAlchemyUserStore(create_session_factory(async_url))
    record = _record(username="bob")

    await store.insert_user(record)

    assert await store.get_by_username(username="bob") == record
    assert await store.get_by_id(user_id=record.user_id) == record
    assert await store.get_by_username(username="missing") is None
    assert await store.get_by_id(user_id=uuid4()) is None
    assert await store.count_users() == 1


@pytest.mark.asyncio
async def test_duplicate_username_raises_duplicate_user_error(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "duplicate.db")
    store = SqlAlchemyUserStore(create_session_factory(async_url))
    await store.insert_user(_record(username="bob"))

    with pytest.raises(DuplicateUserError):
        await store.insert_user(_record(username="bob"))

    assert await store.count_users() == 1


@pytest.mark.asyncio
async def test_save_user_overwrites_fields_and_rejects_username_collision(
    tmp_path: Path,
) -> None:
    _, async_url = _upgrade_head(tmp_path, "save.db")
    store = SqlAlchemyUserStore(create_session_factory(async_url))
    bob = _record(username="bob")
    alice = _record(username="alice")
    await store.insert_user(bob)
    await store.insert_user(alice)

    updated = UserRecord(
        user_id=bob.user_id,
        username="robert",
        name="Robert",
        surname="Jones",
        email="robert@example.org",
        password_hash="new-hash",
        password_salt="new-salt",
    )
    await store.save_user(updated)

    assert await store.get_by_id(user_id=bob.user_id) == updated
    with pytest.raises(DuplicateUserError):
        await store.save_user(
            UserRecord(
                user_id=bob.user_id,
                username="alice",
                name="Robert",
                surname="Jones",
                email="robert@example.org",
                password_hash="new-hash",
                password_salt="new-salt",
            )
        )


@pytest.mark.asyncio
async def test_list_users_is_ordered_by_username(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "list.db")
    store = SqlAlchemyUserStore(create_session_factory(async_url))
    for username in ("zed", "bob", "mia"):
        await store.insert_user(_record(username=username))

    users = await store.list_users()

    assert [user.username for user in users] == ["bob", "mia", "zed"]


@pytest.mark.asyncio
async def test_association_cleanup_allows_removing_linked_user(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "cleanup.db")
    store = SqlAlchemyUserStore(create_session_factory(async_url))
    record = _record(username="bob")
    await store.insert_user(record)

    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        _link_associations(connection, user_id=record.user_id)

    with pytest.raises(sa.exc.IntegrityError):
        await store.remove_user(user_id=record.user_id)

    await store.clear_administered_repositories(user_id=record.user_id)
    await store.clear_roles(user_id=record.user_id)
    await store.clear_repository_access(user_id=record.user_id)
    await store.clear_team_memberships(user_id=record.user_id)
    await store.remove_user(user_id=record.user_id)

    assert await store.get_by_id(user_id=record.user_id) is None
    with engine.begin() as connection:
        for table in (
            "user_roles",
            "team_members",
            "repository_users",
            "repository_administrators",
        ):
            assert _association_count(connection, table) == 0
        assert _association_count(connection, "roles") == 1


def test_session_factory_requires_url_or_engine() -> None:
    with pytest.raises(ValueError, match="database_url or engine is required"):
        create_session_factory()
