"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "EventLens"
    debug: bool = False
    public_base_url: str = "http://localhost:8000"  # Used in invitation links

    # Server
    host: str = "0.0.0.0"  # Bind to all interfaces for external access
    port: int = 8000
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./eventlens.db"

    # Photo storage
    upload_dir: str = "./uploads"

    # AWS Rekognition face registry
    aws_region: str = "us-east-1"
    rekognition_collection_id: str = "eventlens-faces"
    face_match_threshold: float = 90.0
    face_match_max_results: int = 5

    # SendGrid email delivery
    sendgrid_api_key: str = ""
    email_from: str = "noreply@eventlens.app"

    # Background ingestion
    ingest_workers: int = 4
    stale_report_minutes: int = 15
    stale_after_minutes: int = 30


settings = Settings()
