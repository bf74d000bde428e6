"""Settings configuration for the team membership service."""

from typing import Optional

from dotenv import load_dotenv
from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = ConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Settings
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database
    database_url: Optional[str] = Field(
        default=None, description="PostgreSQL connection URL (postgresql+asyncpg://...)"
    )
    database_pool_size: int = Field(default=5, ge=1, le=50)
    database_pool_overflow: int = Field(default=10, ge=0, le=100)

    # JWT Authentication (tokens are issued by the identity service)
    jwt_secret_key: Optional[str] = Field(default=None, description="Secret key for JWT signing")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30, ge=1, description="Access token expiry in minutes"
    )

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], description="CORS allowed origins"
    )

    # Client links
    client_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the web client, used to build invitation links",
    )

    # Team lifecycle
    invitation_expiry_days: int = Field(
        default=7, ge=1, le=90, description="Days before a pending invitation expires"
    )

    # Outbound mail
    mail_enabled: bool = Field(default=False, description="Send team notification emails")
    mail_server: str = Field(default="smtp.mailtrap.io", description="SMTP host")
    mail_port: int = Field(default=2525, description="SMTP port")
    mail_username: str = Field(default="", description="SMTP username")
    mail_password: str = Field(default="", description="SMTP password")
    mail_from: str = Field(default="noreply@bug-tracker.com", description="Sender address")
    mail_from_name: str = Field(default="Bug Tracker", description="Sender display name")
    mail_starttls: bool = Field(default=True, description="Use STARTTLS")
    mail_ssl_tls: bool = Field(default=False, description="Use implicit TLS")
    mail_suppress_send: bool = Field(
        default=False, description="Build messages but skip SMTP delivery"
    )


def load_settings() -> Settings:
    """Load settings with proper error handling."""
    try:
        return Settings()
    except Exception as e:
        error_msg = f"Failed to load settings: {e}"
        if "database_url" in str(e).lower():
            error_msg += "\nMake sure DATABASE_URL in your .env file is a valid URL"
        raise ValueError(error_msg) from e
