"""Application service for salted password hashing and verification."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from membership_core.application.ports.hashing_strategy_port import (
    HashingStrategyPort,
    RehashCallback,
)
from membership_core.domain.auth.credentials import require_value

logger = logging.getLogger(__name__)


class CredentialHasher:
    """Derive and verify salted hashes across current and superseded strategies."""

    def __init__(
        self,
        *,
        current: HashingStrategyPort,
        legacy: Sequence[HashingStrategyPort] = (),
        on_password_verified: RehashCallback | None = None,
    ) -> None:
        self._current = current
        self._legacy = tuple(legacy)
        self._on_password_verified = on_password_verified

    @property
    def scheme(self) -> str:
        """Scheme name of the strategy used for new hashes."""

        return self._current.scheme

    def generate_salt(self) -> str:
        """Return a fresh salt for the current strategy."""

        return self._current.generate_salt()

    def hash_password(self, password: str, salt: str) -> str:
        """Hash password with salt under the current strategy."""

        require_value(password, argument="password")
        require_value(salt, argument="salt")
        return self._current.hash(password, salt)

    def derive_credentials(self, password: str) -> tuple[str, str]:
        """Return a new ``(salt, hash)`` pair for password."""

        salt = self.generate_salt()
        return salt, self.hash_password(password, salt)

    async def compare(
        self,
        *,
        password: str,
        username: str,
        salt: str,
        stored_hash: str,
    ) -> bool:
        """Verify password against stored hash and upgrade superseded hashes."""

        require_value(password, argument="password")
        require_value(salt, argument="salt")

        strategy = self._matching_strategy(password, salt, stored_hash)
        if strategy is None:
            return False

        if strategy is not self._current:
            logger.debug(
                "password_verified_with_legacy_scheme username=%s scheme=%s",
                username,
                strategy.scheme,
            )
            await self._run_rehash_hook(username=username, password=password)
        elif strategy.needs_rehash(stored_hash):
            await self._run_rehash_hook(username=username, password=password)
        return True

    def matches(self, password: str, salt: str, stored_hash: str) -> bool:
        """Return whether password matches stored hash under any supported strategy."""

        require_value(password, argument="password")
        require_value(salt, argument="salt")
        return self._matching_strategy(password, salt, stored_hash) is not None

    def _matching_strategy(
        self,
        password: str,
        salt: str,
        stored_hash: str,
    ) -> HashingStrategyPort | None:
        for strategy in (self._current, *self._legacy):
            if strategy.verify(password, salt, stored_hash):
                return strategy
        return None

    async def _run_rehash_hook(self, *, username: str, password: str) -> None:
        """Invoke the rehash hook once; its failures never fail the verification."""

        if self._on_password_verified is None:
            return
        try:
            await self._on_password_verified(username, password)
        except Exception:
            logger.exception("password_rehash_failed username=%s", username)
