"""
docsearch Configuration Management

Uses Pydantic Settings for type-safe configuration from environment variables.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    # =========================================================================
    # APPLICATION
    # =========================================================================
    APP_NAME: str = "docsearch"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "info"
    VERSION: str = "0.1.0"

    # =========================================================================
    # SEARCH NODE
    # =========================================================================
    SEARCH_HOST: str = "localhost"
    SEARCH_PORT: int = 8108
    SEARCH_PROTOCOL: str = "http"
    SEARCH_PATH: str = ""
    SEARCH_API_KEY: str = ""
    CONNECTION_TIMEOUT_SECONDS: float = 10.0

    # =========================================================================
    # SEARCH CACHE
    # =========================================================================
    # 0 disables the client-side cache
    CACHE_SEARCH_RESULTS_FOR_SECONDS: int = 0
    SEARCH_CACHE_MAX_SIZE: int = 100
    USE_SERVER_SIDE_SEARCH_CACHE: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @property
    def node_url(self) -> str:
        return f"{self.SEARCH_PROTOCOL}://{self.SEARCH_HOST}:{self.SEARCH_PORT}{self.SEARCH_PATH}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
