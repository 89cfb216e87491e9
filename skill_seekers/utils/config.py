"""Configuration management for environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

from skill_seekers.utils.exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///data/skill-store.db"


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Load configuration from .env file and environment."""
        env_path = Path(".env")
        if env_path.exists():
            load_dotenv(env_path)

        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        # Job scheduling
        self.max_concurrent_jobs = self._get_int("MAX_CONCURRENT_JOBS", 3, minimum=1)
        self.job_poll_interval = self._get_float("JOB_POLL_INTERVAL", 1.0)

        # Scraping defaults
        self.default_max_pages = self._get_int("DEFAULT_MAX_PAGES", 100, minimum=1)
        self.github_token = self.get_optional("GITHUB_TOKEN")

        # Base URL under which stored records are served, if any
        self.store_public_url = self.get_optional("STORE_PUBLIC_URL")

    def _get_int(self, key: str, default: int, minimum: int = 0) -> int:
        """Get integer environment variable.

        Args:
            key: Environment variable name
            default: Value used when the variable is unset
            minimum: Smallest accepted value

        Returns:
            Parsed integer value

        Raises:
            ConfigurationError: If the value is not an integer or below minimum
        """
        raw = os.getenv(key)
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except ValueError as e:
            raise ConfigurationError(f"{key} must be an integer, got '{raw}'") from e
        if value < minimum:
            raise ConfigurationError(f"{key} must be >= {minimum}, got {value}")
        return value

    def _get_float(self, key: str, default: float) -> float:
        """Get positive float environment variable.

        Raises:
            ConfigurationError: If the value is not a positive number
        """
        raw = os.getenv(key)
        if raw is None or raw == "":
            return default
        try:
            value = float(raw)
        except ValueError as e:
            raise ConfigurationError(f"{key} must be a number, got '{raw}'") from e
        if value <= 0:
            raise ConfigurationError(f"{key} must be positive, got {value}")
        return value

    @staticmethod
    def get_optional(key: str, default: str | None = None) -> str | None:
        """Get optional environment variable with default value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default) or default
