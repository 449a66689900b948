"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Import settings loaded from FOG_IMPORT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FOG_IMPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Track documents are decoded with this codec before XML parsing
    text_encoding: str = "utf-8"

    # Upper bound on file reads in flight within one group
    read_concurrency: int = 8

    # Used by the CLI when it installs its loguru sink
    log_level: str = "INFO"


settings = Settings()
