import re
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for webhook processing and Stripe customer bootstrap

    # Stripe
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None
    stripe_price_talent_monthly: Optional[str] = None
    stripe_price_talent_annual: Optional[str] = None

    # Email (Resend HTTP API)
    resend_api_key: Optional[str] = None
    email_from: str = "TOTL Agency <noreply@thetotlagency.com>"
    internal_email_api_key: Optional[str] = None

    # Session
    session_cookie_name: str = "sb-access-token"
    session_cookie_max_age: int = 60 * 60 * 24 * 7

    # App
    app_name: str = "totl-backend"
    site_url: str = "http://localhost:3000"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_internal_email_key(self) -> Optional[str]:
        """Shared secret expected in the internal email header. Local development gets a fixed default."""
        if self.internal_email_api_key:
            return self.internal_email_api_key
        if self.is_production:
            return None
        if self.site_url and not re.search(r"localhost|127\.0\.0\.1", self.site_url, re.IGNORECASE):
            return None
        return "dev-internal-email-key"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
