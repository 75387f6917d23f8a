from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL_REPLY: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE_REPLY: float = 0.2

    META_VERIFY_TOKEN: str = ""
    META_APP_SECRET: str | None = None
    META_GRAPH_API_VERSION: str = "v17.0"
    WHATSAPP_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None

    GOOGLE_CREDENTIALS: str | None = None  # service account JSON
    GOOGLE_CALENDAR_ID: str | None = None

    BUSINESS_NAME: str = "Your Business"
    BUSINESS_TIMEZONE: str = "Europe/Zurich"
    WORKING_HOURS_START: int = 9
    WORKING_HOURS_END: int = 18
    SLOT_INTERVAL_MINUTES: int = 30
    AVAILABILITY_WINDOW_DAYS: int = 7
    APPOINTMENT_TITLE: str = "Beauty Salon Appointment"

    MESSAGE_MAX_AGE_SECONDS: float = 10.0
    DEDUP_TTL_SECONDS: float = 3600.0
    DEDUP_MAX_ENTRIES: int = 10_000
    HISTORY_LIMIT: int = 20
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    AUTO_REPLY_ENABLED: bool = False


settings = Settings()
