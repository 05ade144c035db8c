"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    api_reload: bool = False
    log_level: str = "INFO"

    # Blob storage (s3 or local)
    storage_provider: str = "s3"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    aws_bucket_name: str = "image-repository"
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    local_storage_path: str = "./blob_storage"
    local_storage_url: Optional[str] = None

    # Metadata store (redis or memory)
    metadata_provider: str = "redis"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "image_repo"

    # Uploads
    staging_dir: str = "./temp_uploads"
    max_files_per_upload: int = 5
    download_link_template: str = "./api/images/i/{id}/download"

    # Environment
    environment: str = "development"

    @property
    def blob_config(self) -> dict:
        """Build blob store driver configuration."""
        if self.storage_provider.lower() == "local":
            config = {"base_path": self.local_storage_path}
            if self.local_storage_url:
                config["public_url"] = self.local_storage_url
            return config

        config = {
            "aws_access_key_id": self.aws_access_key_id,
            "aws_secret_access_key": self.aws_secret_access_key,
            "bucket_name": self.aws_bucket_name,
            "region": self.aws_region,
        }
        if self.aws_endpoint_url:
            config["endpoint_url"] = self.aws_endpoint_url
        return config


settings = Settings()
