# gst_engine/core/config.py

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Invoice numbering
    INVOICE_NUMBER_PREFIX: str = Field(
        default="INV",
        validation_alias=AliasChoices("INVOICE_NUMBER_PREFIX", "invoice_number_prefix"),
    )
    INVOICE_NUMBER_MAX_ATTEMPTS: int = Field(
        default=2,
        ge=1,
        validation_alias=AliasChoices("INVOICE_NUMBER_MAX_ATTEMPTS", "invoice_number_max_attempts"),
    )


settings = Settings()
