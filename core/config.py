"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Store Manager happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. database_url -> DATABASE_URL). Type coercion and validation are
      built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used for the bootstrap admin account:
      an ADMIN_EMAIL without an ADMIN_PASSWORD is a startup failure.

Layer rule: core/ is the kernel. This module may not import from api/, auth/,
storage/, repository/, services/ or client/.
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

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

    debug: bool = False
    database_url: str = "sqlite:///storemgr.db"

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    # bcrypt cost factor. 12 is the library default; tests drop it to 4.
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # Bootstrap admin (optional -- empty email means no bootstrap)
    # ------------------------------------------------------------------

    admin_email: str = ""
    admin_password: str = ""
    admin_name: str = "Administrator"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # CLI client
    # ------------------------------------------------------------------

    api_base_url: str = "http://localhost:8000/api/v1"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        """bcrypt accepts cost factors 4 through 31 only."""
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value

    @model_validator(mode="after")
    def validate_admin_bootstrap(self) -> "Settings":
        """Require a password whenever a bootstrap admin email is configured.

        Starting with ADMIN_EMAIL but no ADMIN_PASSWORD would either create an
        account nobody can log into or silently skip the bootstrap. Both hide
        a misconfiguration, so refuse to start instead.
        """
        if self.admin_email and not self.admin_password:
            raise ValueError(
                "ADMIN_PASSWORD is required when ADMIN_EMAIL is set. "
                "Unset ADMIN_EMAIL to skip creating the bootstrap admin."
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
