import logging
import os
import sys
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

from notion_prompts.entities import HandlingMode
from notion_prompts.errors import ConfigurationError

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(name)s] %(levelname)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Notion
    notion_api_key: str = os.getenv("NOTION_API_KEY", "")
    notion_database_id: str = os.getenv("NOTION_DATABASE_ID", "")
    notion_base_url: str = os.getenv("NOTION_BASE_URL", "https://api.notion.com")
    notion_version: str = os.getenv("NOTION_VERSION", "2022-06-28")
    notion_timeout: float = float(os.getenv("NOTION_TIMEOUT", "30.0"))

    # Cache
    cache_expiry_time: int = int(os.getenv("CACHE_EXPIRY_TIME", "300000"))  # 5 minutes, in ms
    serve_stale_on_error: bool = os.getenv("SERVE_STALE_ON_ERROR", "false").lower() == "true"

    # Composition
    prompt_handling_mode: str = os.getenv("PROMPT_HANDLING_MODE", HandlingMode.RETURN_ONLY.value)

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    @property
    def handling_mode(self) -> HandlingMode:
        """Resolve the configured handling mode.

        Unknown values fall back to ``return_only`` with a warning instead of
        refusing to start.

        Returns:
            The parsed HandlingMode
        """
        try:
            return HandlingMode(self.prompt_handling_mode)
        except ValueError:
            logger.warning(
                "Invalid PROMPT_HANDLING_MODE '%s', using '%s'",
                self.prompt_handling_mode,
                HandlingMode.RETURN_ONLY.value,
            )
            return HandlingMode.RETURN_ONLY

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.notion_timeout <= 0:
            raise ValueError("NOTION_TIMEOUT must be positive")

        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {self.log_level!r}")

    def require_credentials(self) -> None:
        """Fail fast when the Notion connector cannot be configured.

        Raises:
            ConfigurationError: If the API key or database id is missing
        """
        if not self.notion_api_key:
            raise ConfigurationError("NOTION_API_KEY must be set")
        if not self.notion_database_id:
            raise ConfigurationError("NOTION_DATABASE_ID must be set")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr in the service's format.

    Args:
        level: Log level name. Defaults to settings.log_level.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel((level or settings.log_level).upper())

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
