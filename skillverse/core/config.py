"""
Core configuration for SkillVerse Backend
Learning and community platform API
"""

import secrets
from typing import Optional, Set

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application Settings
    APP_NAME: str = "SkillVerse"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Courses, blogs and direct messaging for learners and creators"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "SkillVerse Backend"

    # Security
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    PASSWORD_MIN_LENGTH: int = 6
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Comma separated list of administrator emails
    ADMIN_EMAILS: str = Field(default="")

    # Database
    DATABASE_URL: Optional[str] = Field(default=None)
    DB_ECHO: bool = Field(default=False)

    # Frontend
    CLIENT_URL: str = Field(default="http://localhost:5173")
    BACKEND_CORS_ORIGINS: str = Field(
        default="http://localhost:5173,http://localhost:3000"
    )

    # Google identity
    GOOGLE_CLIENT_ID: Optional[str] = Field(default=None)

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = Field(default=None)
    STRIPE_CURRENCY: str = Field(default="inr")

    # Cloudinary
    CLOUDINARY_CLOUD_NAME: Optional[str] = Field(default=None)
    CLOUDINARY_API_KEY: Optional[str] = Field(default=None)
    CLOUDINARY_API_SECRET: Optional[str] = Field(default=None)

    # Email
    SMTP_TLS: bool = Field(default=True)
    SMTP_PORT: int = Field(default=587)
    SMTP_HOST: Optional[str] = Field(default=None)
    SMTP_USER: Optional[str] = Field(default=None)
    SMTP_PASSWORD: Optional[str] = Field(default=None)
    EMAILS_FROM_NAME: str = Field(default="SkillVerse")
    EMAILS_FROM_EMAIL: Optional[str] = Field(default=None)

    # Sentry
    SENTRY_DSN: Optional[str] = Field(default=None)

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_REQUESTS: int = Field(default=100)
    RATE_LIMIT_PERIOD: int = Field(default=60)  # seconds

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = Field(default=None)
    LOG_MAX_BYTES: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # Outbound calls
    HTTP_TIMEOUT: float = Field(default=10.0)
    SELF_PING_URL: Optional[str] = Field(default=None)
    SELF_PING_INTERVAL: int = Field(default=30)  # seconds

    def get_database_url(self) -> str:
        """Get database URL with proper formatting"""
        if self.DATABASE_URL:
            # Handle Render's postgres:// URLs
            db_url = self.DATABASE_URL
            if db_url.startswith("postgres://"):
                db_url = db_url.replace("postgres://", "postgresql://", 1)
            return db_url

        # Default for development
        return "sqlite:///./skillverse.db"

    def get_cors_origins(self) -> list[str]:
        """Get CORS origins as list"""
        origins = [self.CLIENT_URL.rstrip("/")]
        if self.BACKEND_CORS_ORIGINS:
            origins.extend(
                origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()
            )
        return list(dict.fromkeys(origins))

    def get_admin_emails(self) -> Set[str]:
        return {
            email.strip().lower() for email in self.ADMIN_EMAILS.split(",") if email.strip()
        }

    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    def cloudinary_configured(self) -> bool:
        return all(
            [self.CLOUDINARY_CLOUD_NAME, self.CLOUDINARY_API_KEY, self.CLOUDINARY_API_SECRET]
        )

    def smtp_configured(self) -> bool:
        return all([self.SMTP_HOST, self.SMTP_USER, self.SMTP_PASSWORD])


settings = Settings()
