from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for user administration and seeding

    # Coupons
    public_base_url: str = "http://localhost:3000"  # Origin of the public coupon page
    default_coupon_limit: int = 10
    coupon_code_max_attempts: int = 20
    expiry_sweep_enabled: bool = False
    expiry_sweep_interval_seconds: int = 300

    # AI proxy used for discount suggestions
    ai_proxy_url: Optional[str] = None
    ai_proxy_model: str = "gpt-4o-mini"
    ai_proxy_timeout_seconds: int = 30

    # App
    app_name: str = "couponcrafter-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:9002,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    rate_limit_enabled: bool = True
    seed_endpoint_enabled: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def seed_endpoint_allowed(self) -> bool:
        return self.seed_endpoint_enabled and not self.is_production

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
