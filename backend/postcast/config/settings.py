"""
Application Configuration Module

Uses pydantic-settings for type-safe environment variable handling.
Following official Pydantic Settings documentation:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are automatically loaded from:
    1. Environment variables
    2. .env file (if present)

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =========================================================================
    # Application Settings
    # =========================================================================
    app_name: str = Field(default="Tech Post Cast API", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    debug: bool = Field(default=False, alias="DEBUG")

    # =========================================================================
    # Authentication (identity provider issued JWTs)
    # =========================================================================
    clerk_jwt_public_key: str = Field(default="", alias="CLERK_JWT_PUBLIC_KEY")
    jwt_algorithm: str = Field(default="RS256", alias="JWT_ALGORITHM")
    clerk_webhook_secret: str = Field(default="", alias="CLERK_WEBHOOK_SECRET")

    # =========================================================================
    # Database Settings
    # =========================================================================
    database_url: str = Field(..., alias="DATABASE_URL")
    db_create_tables: bool = Field(default=False, alias="DB_CREATE_TABLES")

    # =========================================================================
    # Subscription Plans
    # =========================================================================
    free_plan_id: str = Field(default="free", alias="FREE_PLAN_ID")

    # =========================================================================
    # Personal RSS Settings
    # =========================================================================
    rss_url_prefix: str = Field(
        default="https://rss.techpostcast.com",
        alias="RSS_URL_PREFIX"
    )
    rss_bucket_name: str = Field(
        default="tech-post-cast-rss",
        alias="RSS_BUCKET_NAME"
    )
    rss_max_episodes: int = Field(default=30, alias="RSS_MAX_EPISODES")
    lp_base_url: str = Field(
        default="https://techpostcast.com",
        alias="LP_BASE_URL"
    )
    default_program_image_url: str = Field(
        default="https://techpostcast.com/images/default-program.jpg",
        alias="DEFAULT_PROGRAM_IMAGE_URL"
    )
    podcast_author_name: str = Field(
        default="Tech Post Cast",
        alias="PODCAST_AUTHOR_NAME"
    )
    podcast_author_email: str = Field(
        default="info@techpostcast.com",
        alias="PODCAST_AUTHOR_EMAIL"
    )

    # =========================================================================
    # Object Storage (Cloudflare R2 or AWS S3)
    # =========================================================================
    cloudflare_r2_endpoint: Optional[str] = Field(
        default=None,
        alias="CLOUDFLARE_R2_ENDPOINT"
    )
    cloudflare_access_key_id: Optional[str] = Field(
        default=None,
        alias="CLOUDFLARE_ACCESS_KEY_ID"
    )
    cloudflare_secret_access_key: Optional[str] = Field(
        default=None,
        alias="CLOUDFLARE_SECRET_ACCESS_KEY"
    )
    aws_region: str = Field(default="ap-northeast-1", alias="AWS_REGION")

    # =========================================================================
    # External APIs
    # =========================================================================
    qiita_api_access_token: str = Field(default="", alias="QIITA_API_ACCESS_TOKEN")
    qiita_api_timeout: int = Field(default=30, alias="QIITA_API_TIMEOUT")
    slack_webhook_timeout: int = Field(default=10, alias="SLACK_WEBHOOK_TIMEOUT")

    # =========================================================================
    # CORS Settings
    # =========================================================================
    frontend_url: str = Field(
        default="http://localhost:3000",
        alias="FRONTEND_URL"
    )
    allowed_origins: str = Field(
        default="http://localhost:3000,https://techpostcast.com",
        alias="ALLOWED_ORIGINS"
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        origins = [origin.strip() for origin in self.allowed_origins.split(",")]
        if self.frontend_url and self.frontend_url not in origins:
            origins.append(self.frontend_url)
        return origins

    @property
    def uses_cloudflare_r2(self) -> bool:
        """R2 is used whenever an access key id is configured."""
        return bool(self.cloudflare_access_key_id)

    @field_validator("rss_url_prefix", "lp_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """URL prefixes are joined with '/' so they must not end with one."""
        return v.rstrip("/")

    @field_validator("rss_max_episodes")
    @classmethod
    def validate_max_episodes(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RSS_MAX_EPISODES must be at least 1")
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Export settings instance for convenience
settings = get_settings()
