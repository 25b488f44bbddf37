from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────
    database_hostname: str = "localhost"
    database_port: str = "5432"
    database_password: str = "postgres"
    database_name: str = "civic_tracker"
    database_username: str = "postgres"
    # Full SQLAlchemy URL; when set it wins over the individual parts above
    sqlalchemy_database_url: Optional[str] = None

    # ── JWT ───────────────────────────────────────────────────
    secret_key: str = "change_me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 120

    # ── OTP ───────────────────────────────────────────────────
    app_name: str = "Civic Tracker"
    otp_length: int = 6
    otp_expiry_minutes: int = 5
    otp_resend_cooldown_seconds: int = 45
    otp_max_attempts: int = 5
    # Comma-separated phone identities that verify as admin
    admin_phones: str = "8888888888"
    phone_country_code: str = "91"

    # ── SMS (Twilio) ──────────────────────────────────────────
    # Local echo: codes are logged instead of sent. Also the fallback
    # whenever the Twilio credentials below are missing.
    sms_local_echo: bool = False
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_from: str = ""
    sms_timeout_seconds: int = 10

    # ── Uploads ───────────────────────────────────────────────
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # ── App ───────────────────────────────────────────────────
    cors_origins: str = "http://localhost:8080"
    rate_limit_enabled: bool = True
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        """Split comma-separated origins into a list, stripping whitespace."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def admin_phone_list(self) -> list[str]:
        return [phone.strip() for phone in self.admin_phones.split(",") if phone.strip()]

    @property
    def sms_transport_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_from)

    @property
    def database_url(self) -> str:
        if self.sqlalchemy_database_url:
            return self.sqlalchemy_database_url
        return (
            f"postgresql://{self.database_username}:{self.database_password}"
            f"@{self.database_hostname}:{self.database_port}/{self.database_name}"
        )

    class Config:
        env_file = ".env"
        # Case-insensitive so DATABASE_HOSTNAME and database_hostname both work
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings loader — reads .env once and reuses.
    Routers receive it through Depends(get_settings) and hand it to services.
    """
    return Settings()
