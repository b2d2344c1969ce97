from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RsyncDirBaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    app_env: str = Field(
        default="dev",
        description="Deployment environment (e.g., dev, staging, prod). Attached to every log record."
    )
