import os
import logging
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class IdentityProviderSettings(BaseModel):
    jwt_secret: Optional[str] = Field(default=os.getenv("IDP_JWT_SECRET"))
    jwt_algorithm: str = Field(default=os.getenv("IDP_JWT_ALGORITHM", "HS256"))
    audience: Optional[str] = Field(default=os.getenv("IDP_AUDIENCE"))
    issuer: Optional[str] = Field(default=os.getenv("IDP_ISSUER"))


class Config(BaseModel):
    app_name: str = "Leave Service"
    environment: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Persistent store
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./leave.db")
    store_timeout_seconds: float = float(os.getenv("STORE_TIMEOUT_SECONDS", "5"))

    # Day boundary used for "start date cannot be in the past"
    server_timezone: str = os.getenv("SERVER_TIMEZONE", "UTC")

    # Identity provider and role policy
    idp: IdentityProviderSettings = IdentityProviderSettings()
    admin_emails: List[str] = Field(default_factory=lambda: [e.lower() for e in _csv_env("ADMIN_EMAILS")])
    admin_ids: List[str] = Field(default_factory=lambda: _csv_env("ADMIN_IDS"))

    # Allocation given to an account that has no balance record yet
    default_balance: Dict[str, int] = Field(
        default_factory=lambda: {
            "annual": int(os.getenv("DEFAULT_ANNUAL_DAYS", "12")),
            "sick": int(os.getenv("DEFAULT_SICK_DAYS", "10")),
            "casual": int(os.getenv("DEFAULT_CASUAL_DAYS", "8")),
        }
    )

    cors_origins: List[str] = Field(
        default_factory=lambda: _csv_env(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,"
            "http://127.0.0.1:3000,http://127.0.0.1:5173",
        )
    )
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if not settings.idp.jwt_secret:
        raise RuntimeError(
            "FATAL: IDP_JWT_SECRET must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif not settings.idp.jwt_secret:
    _logger.warning("⚠ IDP_JWT_SECRET is not set; every authenticated call will fail with 503.")
