import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Public URLs
    images_url: str = os.getenv("IMAGES_URL", "https://images.opencollective.com")
    website_url: str = os.getenv("WEBSITE_URL", "https://opencollective.com")

    # Graph API
    api_url: str = os.getenv("API_URL", "https://api.opencollective.com")
    api_key: str | None = os.getenv("API_KEY")

    # Third-party image services
    badge_service_url: str = os.getenv("BADGE_SERVICE_URL", "https://img.shields.io")
    cloudinary_base_url: str = os.getenv(
        "CLOUDINARY_BASE_URL",
        "https://res.cloudinary.com/opencollective/image/fetch",
    )

    # Member cache
    member_cache_max_entries: int = int(os.getenv("MEMBER_CACHE_MAX_ENTRIES", "5000"))
    member_cache_ttl: int = int(os.getenv("MEMBER_CACHE_TTL", "600"))  # 10 minutes

    # Outbound HTTP
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    environment: str = os.getenv("ENVIRONMENT", "local")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3001"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def graphql_url(self) -> str:
        """Full URL of the GraphQL endpoint."""
        return f"{self.api_url.rstrip('/')}/graphql"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.member_cache_max_entries <= 0:
            raise ValueError("MEMBER_CACHE_MAX_ENTRIES must be a positive integer")

        if self.member_cache_ttl <= 0:
            raise ValueError("MEMBER_CACHE_TTL must be a positive number of seconds")

        if self.http_timeout <= 0:
            raise ValueError(f"HTTP_TIMEOUT must be positive, got {self.http_timeout}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
