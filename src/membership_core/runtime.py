"""Composition root wiring settings, store, hashing strategies and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from membership_core.application.services.admin_bootstrap import (
    ensure_initial_admin_user,
    resolve_admin_bootstrap_config,
)
from membership_core.application.services.membership_service import MembershipService
from membership_core.config.settings import Settings, load_settings
from membership_core.infrastructure.db.session import (
    create_database_engine,
    create_session_factory,
)
from membership_core.infrastructure.db.user_store import SqlAlchemyUserStore
from membership_core.infrastructure.logging import configure_logging
from membership_core.infrastructure.security.hashing_strategies import build_hashing_strategies

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipRuntime:
    """Started membership service together with the engine it owns."""

    membership: MembershipService
    engine: AsyncEngine

    async def dispose(self) -> None:
        """Close pooled database connections."""

        await self.engine.dispose()
        logger.info("membership_runtime_disposed")


def build_membership_service(
    *,
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> MembershipService:
    """Build a membership service backed by the SQLAlchemy user store."""

    if session_factory is None:
        session_factory = create_session_factory(settings.database_url)
    current, legacy = build_hashing_strategies(
        scheme=settings.password_hash_scheme,
        bcrypt_rounds=settings.password_bcrypt_rounds,
        pbkdf2_iterations=settings.password_pbkdf2_iterations,
    )
    return MembershipService(
        users=SqlAlchemyUserStore(session_factory),
        password_strategy=current,
        legacy_password_strategies=legacy,
        reset_token_iterations=settings.reset_token_iterations,
    )


async def start_membership_runtime(*, settings: Settings | None = None) -> MembershipRuntime:
    """Configure logging, build the membership service and seed the first admin.

    The caller owns the returned runtime and disposes it on shutdown.
    """

    if settings is None:
        settings = load_settings()
    configure_logging(level=settings.log_level)

    bootstrap_config = resolve_admin_bootstrap_config(
        username=settings.bootstrap_admin_username,
        password=settings.bootstrap_admin_password,
        password_file=settings.bootstrap_admin_password_file,
        email=settings.bootstrap_admin_email,
        name=settings.bootstrap_admin_name,
        surname=settings.bootstrap_admin_surname,
    )
    engine = create_database_engine(settings.database_url)
    membership = build_membership_service(
        settings=settings,
        session_factory=create_session_factory(engine=engine),
    )
    logger.info(
        "membership_runtime_started password_hash_scheme=%s",
        settings.password_hash_scheme,
    )

    if bootstrap_config is not None:
        try:
            result = await ensure_initial_admin_user(
                membership=membership,
                config=bootstrap_config,
            )
        except Exception:
            await engine.dispose()
            raise
        logger.info(
            "admin_bootstrap_result username=%s outcome=%s",
            result.username,
            result.outcome.value,
        )
    return MembershipRuntime(membership=membership, engine=engine)
