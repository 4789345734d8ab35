"""Configuration management for s3-tools."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3-tools"

    # Retry policy defaults for object store calls
    retry_max_attempts: int = 5
    retry_base_delay: float = 0.5
    retry_max_delay: Optional[float] = None

    # S3 DeleteObjects accepts at most 1000 keys per request
    delete_page_size: int = 1000

    model_config = {
        "env_prefix": "S3_TOOLS_",
        "case_sensitive": False,
    }


settings = Settings()
