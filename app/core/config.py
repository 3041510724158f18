import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()


class ReviewPolicy(BaseModel):
    # Reject is open to any actor in any status unless this is switched on
    strict_reject: bool = Field(default=os.getenv("REVIEW_STRICT_REJECT", "false").lower() == "true")
    work_performance_weight_total: float = 80.0
    max_item_score: float = 120.0


class Config(BaseModel):
    app_name: str = "Performance Review Platform"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api/v1"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./reviews.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Review workflow
    review: ReviewPolicy = ReviewPolicy()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS origins, comma-separated in the environment
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:3100,"
                "http://127.0.0.1:3000,http://127.0.0.1:3100",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    seed_demo_data: bool = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.secret_key:
        raise RuntimeError(
            "FATAL: SECRET_KEY must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("⚠ Using insecure default SECRET_KEY, acceptable in development only.")
