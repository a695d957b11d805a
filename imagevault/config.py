import os
from typing import List, Optional

from pydantic_settings import BaseSettings

# Settings that must be present before any call reaches the object store
REQUIRED_SETTINGS = (
    "AWS_S3_BUCKET",
    "AWS_REGION",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
)


class Settings(BaseSettings):
    AWS_S3_BUCKET: str = ""
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_ENDPOINT_URL: Optional[str] = None
    ENV: str = "dev"
    PORT: int = 4000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    UPLOAD_PREFIX: str = "uploads/"

    @property
    def aws_endpoint(self) -> Optional[str]:
        if self.AWS_ENDPOINT_URL:
            return self.AWS_ENDPOINT_URL
        localstack_host = os.environ.get("LOCALSTACK_HOSTNAME")
        if localstack_host:
            return f"http://{localstack_host}:4566"
        return None

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def missing_settings(self) -> List[str]:
        """Names of the required settings that are unset or empty, in a fixed order."""
        return [name for name in REQUIRED_SETTINGS if not getattr(self, name)]

    model_config = {
        "env_file": ".env",
        "extra": "ignore"
    }

settings = Settings()

def get_settings() -> Settings:
    return settings
