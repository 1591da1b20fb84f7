"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Postboard happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. session_ttl_seconds -> SESSION_TTL_SECONDS).

  @model_validator(mode="after"): Cross-field checks on the session settings.
      A renewal window that is not shorter than the TTL would renew on every
      request, so it is rejected at startup instead.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
auth/, or posts/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("postboard.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'postboard.db'}"
_SAME_SITE_VALUES = {"lax", "strict", "none"}


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
    database_url: str = _DEFAULT_DB_URL
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    session_cookie_name: str = "auth_session"
    session_ttl_seconds: int = 30 * 24 * 3600
    # 0 keeps a fixed TTL. A positive value renews the expiry (same token)
    # once fewer than this many seconds remain.
    session_renew_seconds: int = 0
    session_purge_interval_seconds: int = 3600
    secure_cookies: bool = False
    cookie_same_site: str = "lax"

    # ------------------------------------------------------------------
    # Forms
    # ------------------------------------------------------------------

    password_min_length: int = 8
    post_max_length: int = 280

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_sessions(self) -> "Settings":
        """Reject session settings that would break the lifecycle.

        - TTL must be positive; a zero TTL would expire every session on issue.
        - The renewal window must be shorter than the TTL.
        - SameSite must be one of lax/strict/none. SameSite=None without the
          Secure flag is dropped by browsers, so warn about it.
        """
        if self.session_ttl_seconds <= 0:
            raise ValueError("SESSION_TTL_SECONDS must be positive.")
        if self.session_renew_seconds < 0 or self.session_renew_seconds >= self.session_ttl_seconds:
            raise ValueError("SESSION_RENEW_SECONDS must be >= 0 and smaller than SESSION_TTL_SECONDS.")
        self.cookie_same_site = self.cookie_same_site.lower()
        if self.cookie_same_site not in _SAME_SITE_VALUES:
            raise ValueError(f"COOKIE_SAME_SITE must be one of {sorted(_SAME_SITE_VALUES)}.")
        if self.cookie_same_site == "none" and not self.secure_cookies:
            logger.warning("COOKIE_SAME_SITE=none without SECURE_COOKIES=true; browsers will reject the cookie.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
