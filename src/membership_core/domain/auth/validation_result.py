"""Outcome of one username/password credential check."""

from __future__ import annotations

from enum import StrEnum


class ValidationResult(StrEnum):
    """Supported credential validation outcomes."""

    SUCCESS = "success"
    FAILURE = "failure"
