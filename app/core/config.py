from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "ENV", "environment"))
    APP_NAME: str = Field(default="relief_bot", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    PORT: int = Field(default=3000, validation_alias=AliasChoices("PORT", "port"))

    # Messenger Platform
    VERIFY_TOKEN: str = Field(default="", validation_alias=AliasChoices("VERIFY_TOKEN", "MESSENGER_VERIFY_TOKEN", "verify_token"))
    PAGE_ACCESS_TOKEN: str = Field(default="", validation_alias=AliasChoices("PAGE_ACCESS_TOKEN", "MESSENGER_ACCESS_TOKEN", "page_access_token"))
    GRAPH_API_BASE: str = Field(default="https://graph.facebook.com", validation_alias=AliasChoices("GRAPH_API_BASE", "graph_api_base"))
    GRAPH_API_VERSION: str = Field(default="v21.0", validation_alias=AliasChoices("GRAPH_API_VERSION", "graph_api_version"))
    SEND_TIMEOUT_SECONDS: float = Field(default=10.0, validation_alias=AliasChoices("SEND_TIMEOUT_SECONDS", "send_timeout_seconds"))

    # Conversation
    FLOW_VARIANT: str = Field(default="emergency", validation_alias=AliasChoices("FLOW_VARIANT", "BOT_VARIANT", "flow_variant"))
    SESSION_IDLE_TIMEOUT_SECONDS: float = Field(
        default=30 * 60,
        validation_alias=AliasChoices("SESSION_IDLE_TIMEOUT_SECONDS", "session_idle_timeout_seconds"),
    )
    SESSION_SWEEP_INTERVAL_SECONDS: float = Field(
        default=60,
        validation_alias=AliasChoices("SESSION_SWEEP_INTERVAL_SECONDS", "session_sweep_interval_seconds"),
    )

    # Finalized reports (empty URL = log only)
    REPORT_WEBHOOK_URL: str = Field(default="", validation_alias=AliasChoices("REPORT_WEBHOOK_URL", "report_webhook_url"))
    REPORT_TIMEOUT_SECONDS: float = Field(default=10.0, validation_alias=AliasChoices("REPORT_TIMEOUT_SECONDS", "report_timeout_seconds"))


settings = Settings()
