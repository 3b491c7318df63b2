"""Configuration management for s3glob."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3glob"

    default_high_water_mark: int = 200
    default_format: Literal["object", "query"] = "object"
    default_unique: bool = True

    model_config = {
        "env_prefix": "S3GLOB_",
        "case_sensitive": False,
    }


settings = Settings()
