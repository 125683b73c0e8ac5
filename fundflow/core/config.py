from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # App
    app_name: str = "FundFlow API"
    service_name: str = "fundflow-api"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./fundflow.db"

    # Authentication
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiration: int = 30 * 24 * 3600  # seconds

    # CORS
    cors_origins: List[str] = ["*"]

    # Payment provider (Stripe)
    stripe_secret_key: str = ""
    stripe_api_base: str = "https://api.stripe.com"
    payment_currency: str = "usd"
    payment_timeout: float = 10.0

    # Email provider (SendGrid)
    sendgrid_api_key: str = ""
    sendgrid_from_email: str = ""
    sendgrid_api_base: str = "https://api.sendgrid.com"
    email_timeout: float = 10.0

    # Links embedded in emails
    frontend_url: str = "http://localhost:3000"

    # Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://localhost:4318/v1/traces"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
