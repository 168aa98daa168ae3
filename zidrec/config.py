"""Application settings.

Values come from environment variables (case-sensitive) and an optional
``.env`` file in the working directory.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Runtime configuration for the recommendation service."""

    # Zid API
    ZID_API_URL: str = "https://api.zid.sa"
    ZID_ACCESS_TOKEN: Optional[str] = None
    TOKEN_FILE: str = "storage/tokens.json"
    FETCH_PAGE_SIZE: int = 100
    REQUEST_TIMEOUT_S: float = 10.0

    # Snapshot cache
    CACHE_FILE: str = "storage/cache.json"

    # Engine
    MAX_RECOMMENDATIONS: int = 5

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def resolve_access_token(self) -> Optional[str]:
        """Return the bearer token for the Zid API.

        ``ZID_ACCESS_TOKEN`` wins; otherwise the ``access_token`` key of
        ``TOKEN_FILE`` (written by the store installer) is used.
        """
        if self.ZID_ACCESS_TOKEN:
            return self.ZID_ACCESS_TOKEN

        token_path = Path(self.TOKEN_FILE)
        if not token_path.exists():
            return None

        try:
            data = json.loads(token_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(
                "Could not read token file",
                extra={"token_file": str(token_path), "error": str(e)},
            )
            return None

        if not isinstance(data, dict):
            return None
        return data.get("access_token") or None


@lru_cache
def get_settings() -> Settings:
    """Cached settings factory, cheap to inject via FastAPI dependencies."""
    return Settings()
