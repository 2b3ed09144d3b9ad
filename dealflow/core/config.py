"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str
    DB_STATEMENT_TIMEOUT_MS: int = 15000  # Postgres only

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Internal scheduled endpoints (cron jobs)
    INTERNAL_SECRET: str = ""  # Secret for /internal/scheduled/* endpoints

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Email (Resend)
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Acorn Finance <notifications@acorn.finance>"

    # SMS / WhatsApp (Twilio)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_PHONE_NUMBER: str = ""
    TWILIO_WHATSAPP_NUMBER: str = ""
    TWILIO_API_BASE_URL: str = "https://api.twilio.com/2010-04-01"

    # Applies to every outbound HTTP call (mail, SMS)
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = 10.0

    # Idle deal scanner
    IDLE_DEAL_THRESHOLD_DAYS: int = 7
    IDLE_DEAL_TASK_DUE_DAYS: int = 3
    IDLE_DEAL_STATUSES: str = "draft,in_progress,submitted"

    # Scheduler cadences
    IDLE_SCAN_INTERVAL_SECONDS: int = 86400
    CALLBACK_REMINDER_INTERVAL_SECONDS: int = 120

    # Timezone used when rendering times inside reminder messages
    REMINDER_DISPLAY_TIMEZONE: str = "Europe/London"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def idle_deal_statuses(self) -> list[str]:
        """Parse IDLE_DEAL_STATUSES into a list of status values."""
        return [s.strip() for s in self.IDLE_DEAL_STATUSES.split(",") if s.strip()]

    @property
    def sms_configured(self) -> bool:
        return bool(self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN)


settings = Settings()
