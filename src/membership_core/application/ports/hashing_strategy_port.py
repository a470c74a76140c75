"""Port for replaceable salted password hashing strategies."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Protocol

RehashCallback = Callable[[str, str], Awaitable[None]]
"""Invoked as ``callback(username, password)`` after a superseded hash verified."""


class HashingStrategyPort(Protocol):
    """Salted hashing contract."""

    scheme: str

    def generate_salt(self) -> str:
        """Return a fresh random salt in the format this strategy expects."""

    def hash(self, password: str, salt: str) -> str:
        """Return the deterministic hash of password for salt."""

    def verify(self, password: str, salt: str, stored_hash: str) -> bool:
        """Return whether stored_hash was produced by this strategy for password+salt."""

    def needs_rehash(self, stored_hash: str) -> bool:
        """Return whether a verified stored_hash uses outdated parameters."""
