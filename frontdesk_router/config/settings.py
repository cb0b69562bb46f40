from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from pathlib import Path


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FRONTDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = "INFO"

    # Catalogue snapshot used by the CLI when no path is given
    catalogue_path: Optional[str] = Field(default=None)
    environment: str = "default"

    # Holiday calendar (best-effort, fails open)
    holiday_region: str = "US"
    holiday_api_url: Optional[str] = None
    holiday_api_key: Optional[str] = None
    holiday_timeout_seconds: float = 2.0

    # Intent classifier
    classifier_url: Optional[str] = None
    classifier_api_key: Optional[str] = None
    classifier_timeout_seconds: float = 5.0

    # Integration connectors (EHR / calendar / SMS / transfer)
    integration_base_url: Optional[str] = None
    integration_api_key: Optional[str] = None
    tool_timeout_seconds: float = 10.0

    def __init__(self, **kwargs):
        # Prefer a .env file in the current working directory
        cwd_env = Path.cwd() / ".env"

        if cwd_env.exists():
            super().__init__(_env_file=str(cwd_env), **kwargs)
        else:
            super().__init__(_env_file=None, **kwargs)


settings = Settings()
