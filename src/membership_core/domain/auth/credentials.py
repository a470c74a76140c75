"""Shared validation and normalization helpers for user credential inputs."""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Raised when a required credential input is missing or empty."""

    def __init__(self, *, argument: str) -> None:
        super().__init__(f"{argument} cannot be null or empty")
        self.argument = argument


def require_value(value: str | None, *, argument: str) -> str:
    """Return value unchanged or reject missing/empty input."""

    if not value:
        raise InvalidArgumentError(argument=argument)
    return value


def normalize_username(username: str) -> str:
    """Return the canonical lowercase form used for storage and lookups."""

    return username.lower()
