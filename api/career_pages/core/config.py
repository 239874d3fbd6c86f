from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "career-pages-api"
    environment: str = "dev"
    site_url: str = "http://localhost:8000"
    database_url: str | None = None
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    supabase_service_key: str | None = None
    storage_bucket: str = "career-assets"
    auth_timeout_seconds: float = 5.0
    storage_timeout_seconds: float = 30.0
    jobs_per_page: int = 20
    public_cache_ttl_seconds: int = 300
    public_cache_max_entries: int = 256
    editor_session_idle_seconds: float = 3600.0
    revalidate_webhook_url: str | None = None
    revalidate_timeout_seconds: float = 5.0
    otel_enabled: bool = True
    otel_service_name: str = "career-pages-api"
    otel_exporter_otlp_endpoint: str | None = None
    otel_exporter_otlp_headers: str | None = None
    otel_trace_sample_ratio: float = 1.0
    otel_log_correlation: bool = True

    model_config = SettingsConfigDict(env_prefix="CP_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
