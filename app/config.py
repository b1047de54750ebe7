from datetime import timedelta
from typing import Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration with environment variable mapping.
    All settings can be defined in .env file or as environment variables.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core settings
    PROJECT_NAME: str = Field(default="Feedback Bot")
    PROJECT_DESCRIPTION: str = Field(
        default="WhatsApp feedback collection service"
    )
    ENVIRONMENT: Literal["dev", "prod"] = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")
    LOGS_DIR: str = Field(default="logs")

    # WhatsApp
    WHATSAPP_TOKEN: str = Field(default="")
    WHATSAPP_PHONE_NUMBER_ID: str = Field(default="")
    WHATSAPP_VERIFY_TOKEN: str = Field(default="")
    WHATSAPP_API_VERSION: str = Field(default="v17.0")

    # Conversation sessions
    SESSION_TIMEOUT_HOURS: float = Field(default=12, gt=0)
    SESSION_CLEANUP_INTERVAL_MINUTES: float = Field(default=60, gt=0)
    TRIGGER_PHRASE: str = Field(default="hi")

    # Completed feedback records (JSON lines), disabled when unset
    FEEDBACK_LOG_PATH: Optional[str] = Field(default=None)

    @property
    def session_timeout(self) -> timedelta:
        return timedelta(hours=self.SESSION_TIMEOUT_HOURS)

    @property
    def cleanup_interval(self) -> timedelta:
        return timedelta(minutes=self.SESSION_CLEANUP_INTERVAL_MINUTES)


settings = Settings()
