import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./mdd_rest.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"
    database_create_all: bool = os.getenv("DATABASE_CREATE_ALL", "true").lower() == "true"

    # REST
    api_base_path: str = os.getenv("API_BASE_PATH", "/api/rest")
    page_size_default: int = int(os.getenv("PAGE_SIZE_DEFAULT", "10"))
    page_size_max: int = int(os.getenv("PAGE_SIZE_MAX", "100"))
    cors_allowed_origin: str = os.getenv("CORS_ALLOWED_ORIGIN", "http://localhost:9000")

    # API server
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "human")  # or "json"

    @property
    def is_sqlite(self) -> bool:
        """Check if the configured database is SQLite.

        Returns:
            True if the database URL uses the sqlite dialect, False otherwise
        """
        return self.database_url.startswith("sqlite")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.page_size_default < 1:
            raise ValueError("PAGE_SIZE_DEFAULT must be at least 1")

        if self.page_size_max < self.page_size_default:
            raise ValueError(
                f"PAGE_SIZE_MAX must be >= PAGE_SIZE_DEFAULT, "
                f"got {self.page_size_max} < {self.page_size_default}"
            )

        if self.log_format not in ("human", "json"):
            raise ValueError(f"LOG_FORMAT must be 'human' or 'json', got {self.log_format}")

        if self.api_base_path and not self.api_base_path.startswith("/"):
            raise ValueError("API_BASE_PATH must start with '/'")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
