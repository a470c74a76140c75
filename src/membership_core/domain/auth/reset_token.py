"""Password-reset token derivation and decoding.

A token is the base64 encoding of a fixed 49-byte layout::

    [1 version byte][16-byte salt][32-byte PBKDF2 subkey]

The subkey is PBKDF2-HMAC-SHA1 over the username with a fresh random salt, so
every call yields a different token for the same user. Tokens are not persisted
here; issuing and consuming them needs an out-of-band store with expiry.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets
from dataclasses import dataclass

RESET_TOKEN_VERSION = 0
RESET_TOKEN_SALT_SIZE = 128 // 8
RESET_TOKEN_SUBKEY_LENGTH = 256 // 8
RESET_TOKEN_DEFAULT_ITERATIONS = 1000
RESET_TOKEN_BYTE_LENGTH = 1 + RESET_TOKEN_SALT_SIZE + RESET_TOKEN_SUBKEY_LENGTH


class InvalidResetTokenError(ValueError):
    """Raised when a reset token cannot be decoded into the expected layout."""


@dataclass(frozen=True)
class ResetTokenParts:
    """Decoded reset token fields."""

    version: int
    salt: bytes
    subkey: bytes


def derive_reset_token(
    *,
    username: str,
    iterations: int = RESET_TOKEN_DEFAULT_ITERATIONS,
) -> str:
    """Derive one base64 reset token for username with a fresh random salt."""

    salt = secrets.token_bytes(RESET_TOKEN_SALT_SIZE)
    subkey = _derive_subkey(username=username, salt=salt, iterations=iterations)
    payload = bytes([RESET_TOKEN_VERSION]) + salt + subkey
    return base64.b64encode(payload).decode("ascii")


def decode_reset_token(token: str) -> ResetTokenParts:
    """Split a base64 reset token into version, salt and subkey."""

    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidResetTokenError("reset token is not valid base64") from exc

    if len(raw) != RESET_TOKEN_BYTE_LENGTH:
        raise InvalidResetTokenError(
            f"reset token must decode to {RESET_TOKEN_BYTE_LENGTH} bytes, got {len(raw)}"
        )
    if raw[0] != RESET_TOKEN_VERSION:
        raise InvalidResetTokenError(f"unsupported reset token version: {raw[0]}")

    salt_end = 1 + RESET_TOKEN_SALT_SIZE
    return ResetTokenParts(version=raw[0], salt=raw[1:salt_end], subkey=raw[salt_end:])


def reset_token_matches(
    *,
    token: str,
    username: str,
    iterations: int = RESET_TOKEN_DEFAULT_ITERATIONS,
) -> bool:
    """Return whether token was derived from username, using a fixed-time comparison."""

    try:
        parts = decode_reset_token(token)
    except InvalidResetTokenError:
        return False
    expected = _derive_subkey(username=username, salt=parts.salt, iterations=iterations)
    return hmac.compare_digest(expected, parts.subkey)


def _derive_subkey(*, username: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha1",
        username.encode("utf-8"),
        salt,
        iterations,
        dklen=RESET_TOKEN_SUBKEY_LENGTH,
    )
