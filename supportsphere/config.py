"""
SupportSphere - Configuration Management
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""

    # Realtime
    realtime_schema: str = "public"

    # Tickets
    default_priority: str = "medium"
    enforce_status_transitions: bool = False
    audit_preview_length: int = 100

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_supabase_configured(self) -> bool:
        """True when the project URL and anon key look real"""
        return bool(
            self.supabase_url
            and not self.supabase_url.startswith("https://your-")
            and self.supabase_key
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
