"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]
BcryptRounds = Annotated[int, Field(ge=4, le=31)]


class Settings(BaseSettings):
    """Environment-driven membership settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    password_hash_scheme: Literal["bcrypt", "pbkdf2_sha256"] = Field(
        default="bcrypt",
        validation_alias="PASSWORD_HASH_SCHEME",
    )
    password_bcrypt_rounds: BcryptRounds = Field(
        default=12,
        validation_alias="PASSWORD_BCRYPT_ROUNDS",
    )
    password_pbkdf2_iterations: PositiveInt = Field(
        default=600_000,
        validation_alias="PASSWORD_PBKDF2_ITERATIONS",
    )
    reset_token_iterations: PositiveInt = Field(
        default=1000,
        validation_alias="RESET_TOKEN_ITERATIONS",
    )
    bootstrap_admin_username: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_USERNAME",
    )
    bootstrap_admin_password: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_PASSWORD",
    )
    bootstrap_admin_password_file: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_PASSWORD_FILE",
    )
    bootstrap_admin_email: NonEmptyStr | None = Field(
        default=None,
        validation_alias="BOOTSTRAP_ADMIN_EMAIL",
    )
    bootstrap_admin_name: NonEmptyStr = Field(
        default="Administrator",
        validation_alias="BOOTSTRAP_ADMIN_NAME",
    )
    bootstrap_admin_surname: NonEmptyStr = Field(
        default="Administrator",
        validation_alias="BOOTSTRAP_ADMIN_SURNAME",
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
