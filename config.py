# config.py
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    environment: str = "dev"
    log_level: str = "INFO"
    log_format: str = "json"

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    database_name: str = "coursebay_db"

    # Auth - change the secret in production!
    secret_key: str = "dev-only-secret-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 120

    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]

    # Payment simulator
    payment_key_id: str = "rzp_test_MOCKKEY"
    payment_key_secret: str = "test_secret"
    payment_currency: str = "INR"
    order_ttl_minutes: int = 30
    verify_payment_signatures: bool = False
    invalid_signature_sentinel: str = "invalid_signature"

    # Quizzes
    quiz_time_grace_seconds: int = 30

    # Email (simulated when no SendGrid key is configured)
    sendgrid_api_key: Optional[str] = None
    from_email: str = "noreply@coursebay.dev"

    platform_name: str = "Coursebay"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings from the environment, loading a .env file if present."""
    load_dotenv()
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "json").lower(),
        mongodb_url=os.getenv("MONGODB_URL", "mongodb://localhost:27017"),
        database_name=os.getenv("DATABASE_NAME", "coursebay_db"),
        secret_key=os.getenv("SECRET_KEY", "dev-only-secret-change-me"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "120")),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        cors_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
        payment_key_id=os.getenv("PAYMENT_KEY_ID", "rzp_test_MOCKKEY"),
        payment_key_secret=os.getenv("PAYMENT_KEY_SECRET", "test_secret"),
        payment_currency=os.getenv("PAYMENT_CURRENCY", "INR"),
        order_ttl_minutes=int(os.getenv("ORDER_TTL_MINUTES", "30")),
        verify_payment_signatures=_env_bool("VERIFY_PAYMENT_SIGNATURES", "false"),
        invalid_signature_sentinel=os.getenv("INVALID_SIGNATURE_SENTINEL", "invalid_signature"),
        quiz_time_grace_seconds=int(os.getenv("QUIZ_TIME_GRACE_SECONDS", "30")),
        sendgrid_api_key=os.getenv("SENDGRID_API_KEY"),
        from_email=os.getenv("FROM_EMAIL", "noreply@coursebay.dev"),
        platform_name=os.getenv("PLATFORM_NAME", "Coursebay"),
    )
