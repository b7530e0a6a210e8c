from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key; requests run with the caller's JWT on top of it
    supabase_service_role_key: Optional[str] = None  # Only needed by maintenance scripts

    # Event header images
    header_image_bucket: str = "event-header-images"
    header_image_content_type: str = "image/png"

    # AWS S3 (optional; Supabase Storage is used when unset)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Events
    display_timezone: str = "UTC"
    upcoming_grace_hours: int = 1  # events stay listed this long after they start

    # Auth
    login_redirect_url: Optional[str] = None

    # App
    app_name: str = "event-registration-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def s3_configured(self) -> bool:
        return all([self.aws_access_key_id, self.aws_secret_access_key, self.s3_bucket_name])

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def missing_supabase_settings(self) -> List[str]:
        missing = []
        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_key:
            missing.append("SUPABASE_KEY")
        return missing

    def log_missing_supabase_settings(self) -> bool:
        """Log an error when the Supabase credentials are absent. Returns True if all are set."""
        missing = self.missing_supabase_settings()
        if missing:
            logger.error(
                "Missing %s, please set these in an .env file", " and/or ".join(missing)
            )
            return False
        return True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
