"""
core/config.py -- FieldBook settings.

Every environment read goes through get_settings(); field names map to env
vars (SECRET_KEY, DATABASE_URL, TOKEN_EXPIRE_SECONDS, ALLOWED_HOSTS, ...)
and may also come from a .env file.

SECRET_KEY signs session tokens. With DEBUG=true a throwaway key is
generated when none is set; otherwise startup fails. Keys under 32
characters are always rejected.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("fieldbook.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'fieldbook.db'}"


class Settings(BaseSettings):
    """Runtime configuration. Every field has a default usable in tests."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    secret_key: str = ""  # "" means unset; resolved by check_secret_key
    database_url: str = _DEFAULT_DB_URL

    # session tokens
    token_expire_seconds: int = 3600

    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost", "testserver"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # applied to login, forgot-password and reset-password
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        """Fill in a dev key under DEBUG, otherwise require a strong one."""
        if not self.secret_key:
            if not self.debug:
                raise ValueError("SECRET_KEY is not set. Provide one, or run with DEBUG=true for a throwaway key.")
            self.secret_key = secrets.token_hex(32)
            logger.warning("SECRET_KEY not set; generated one for this process. Issued sessions end on restart.")
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings; tests call get_settings.cache_clear() to reload."""
    return Settings()
