"""Configuration management for s3-datastore."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3-datastore"

    # Threads used to fan out a batch commit
    batch_max_workers: int = Field(16, ge=1)
    # S3 caps a single list_objects_v2 page at 1000 keys
    list_page_size: int = Field(1000, ge=1, le=1000)
    create_bucket_attempts: int = Field(1, ge=0)

    model_config = {
        "env_prefix": "S3_DATASTORE_",
        "case_sensitive": False,
    }


settings = Settings()
