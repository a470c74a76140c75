"""Salted password hashing strategy adapters."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Literal

import bcrypt

from membership_core.application.ports.hashing_strategy_port import HashingStrategyPort

PasswordHashScheme = Literal["bcrypt", "pbkdf2_sha256"]


class BcryptStrategy(HashingStrategyPort):
    """Bcrypt over a SHA-256 digest of the password, keyed by a stored bcrypt salt.

    The digest keeps long passwords inside bcrypt's 72-byte input limit.
    """

    scheme = "bcrypt"

    def __init__(self, *, rounds: int = 12) -> None:
        self._rounds = rounds

    def generate_salt(self) -> str:
        return bcrypt.gensalt(rounds=self._rounds).decode("ascii")

    def hash(self, password: str, salt: str) -> str:
        return bcrypt.hashpw(_prehash(password), salt.encode("ascii")).decode("ascii")

    def verify(self, password: str, salt: str, stored_hash: str) -> bool:
        try:
            candidate = self.hash(password, salt)
        except (ValueError, UnicodeEncodeError):
            return False
        return hmac.compare_digest(candidate.encode("ascii"), stored_hash.encode("utf-8"))

    def needs_rehash(self, stored_hash: str) -> bool:
        parts = stored_hash.split("$")
        if len(parts) < 4 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self._rounds


class Pbkdf2Sha256Strategy(HashingStrategyPort):
    """PBKDF2-HMAC-SHA256 with hashes formatted as ``pbkdf2_sha256$<iterations>$<b64>``."""

    scheme = "pbkdf2_sha256"

    def __init__(self, *, iterations: int = 600_000, salt_bytes: int = 16) -> None:
        self._iterations = iterations
        self._salt_bytes = salt_bytes

    def generate_salt(self) -> str:
        return secrets.token_hex(self._salt_bytes)

    def hash(self, password: str, salt: str) -> str:
        return self._hash_with_iterations(password, salt, self._iterations)

    def verify(self, password: str, salt: str, stored_hash: str) -> bool:
        iterations = _pbkdf2_iterations(stored_hash)
        if iterations is None:
            return False
        candidate = self._hash_with_iterations(password, salt, iterations)
        return hmac.compare_digest(candidate.encode("ascii"), stored_hash.encode("utf-8"))

    def needs_rehash(self, stored_hash: str) -> bool:
        return _pbkdf2_iterations(stored_hash) != self._iterations

    def _hash_with_iterations(self, password: str, salt: str, iterations: int) -> str:
        digest = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations,
        )
        encoded = base64.b64encode(digest).decode("ascii")
        return f"{self.scheme}${iterations}${encoded}"


class LegacySha512Strategy(HashingStrategyPort):
    """Hex SHA-512 over salt and password, accepted only for upgrading old rows."""

    scheme = "legacy_sha512"

    def generate_salt(self) -> str:
        return secrets.token_hex(16)

    def hash(self, password: str, salt: str) -> str:
        return hashlib.sha512((salt + password).encode("utf-8")).hexdigest()

    def verify(self, password: str, salt: str, stored_hash: str) -> bool:
        candidate = self.hash(password, salt)
        return hmac.compare_digest(candidate.encode("ascii"), stored_hash.lower().encode("utf-8"))

    def needs_rehash(self, stored_hash: str) -> bool:
        return True


def build_hashing_strategies(
    *,
    scheme: PasswordHashScheme,
    bcrypt_rounds: int,
    pbkdf2_iterations: int,
) -> tuple[HashingStrategyPort, tuple[HashingStrategyPort, ...]]:
    """Return the current strategy for scheme and every other supported strategy."""

    available: dict[str, HashingStrategyPort] = {
        BcryptStrategy.scheme: BcryptStrategy(rounds=bcrypt_rounds),
        Pbkdf2Sha256Strategy.scheme: Pbkdf2Sha256Strategy(iterations=pbkdf2_iterations),
        LegacySha512Strategy.scheme: LegacySha512Strategy(),
    }
    if scheme not in available or scheme == LegacySha512Strategy.scheme:
        raise ValueError(f"unsupported password hash scheme: {scheme}")

    current = available.pop(scheme)
    return current, tuple(available.values())


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def _pbkdf2_iterations(stored_hash: str) -> int | None:
    parts = stored_hash.split("$")
    if len(parts) != 3 or parts[0] != Pbkdf2Sha256Strategy.scheme or not parts[1].isdigit():
        return None
    iterations = int(parts[1])
    return iterations if iterations > 0 else None
