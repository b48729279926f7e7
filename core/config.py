"""
core/config.py -- Centralized service configuration via pydantic-settings.

All environment variable reads for the SSO service happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. token_ttl_seconds -> TOKEN_TTL_SECONDS).

  @model_validator(mode="after"): Cross-field validation after all fields are
      resolved. A misconfigured TTL or bcrypt cost is a hard startup failure.

Token signing keys are NOT configured here. Every client application carries
its own secret in the apps table; tokens are signed with that secret.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or storage/.
"""

from datetime import timedelta
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'storage' / 'sso.db'}"

ENVIRONMENTS = ("local", "dev", "prod")


class Settings(BaseSettings):
    """Service settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    # "local" and "dev" log at DEBUG, "prod" at INFO.
    env: str = "local"
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_ttl_seconds: int = 3600
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"  # noqa: S104 # nosec B104 -- service listens on all interfaces in containers
    port: int = 44044

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_auth_settings(self) -> "Settings":
        """Refuse to start with settings that would make tokens or hashes unsafe.

        bcrypt accepts cost factors 4..31. Anything below 4 is rejected by the
        library itself; we fail at startup instead of on the first Register.
        """
        if self.env not in ENVIRONMENTS:
            raise ValueError(f"ENV must be one of {', '.join(ENVIRONMENTS)}, got {self.env!r}.")
        if self.token_ttl_seconds <= 0:
            raise ValueError("TOKEN_TTL_SECONDS must be a positive number of seconds.")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return self

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(seconds=self.token_ttl_seconds)


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
