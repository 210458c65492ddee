from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Permission lookups read across RLS with this key

    # Permission evaluation
    permission_cache_ttl_seconds: float = 30.0
    permission_cache_failure_ttl_seconds: float = 0.0  # 0 = failed lookups are not cached
    permission_cache_max_entries: int = 10000
    permission_query_timeout_seconds: float = 3.0

    # Onboarding: where POST /admin/bootstrap places a new user
    bootstrap_org_id: str = "550e8400-e29b-41d4-a716-446655440000"
    bootstrap_location_id: str = "550e8400-e29b-41d4-a716-446655440001"
    bootstrap_role_code: str = "admin"

    # Auth
    auth_cache_ttl_seconds: int = 60
    auth_cache_max_size: int = 500

    # App
    app_name: str = "staffdesk"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
