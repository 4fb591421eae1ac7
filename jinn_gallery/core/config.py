import os
from pydantic import BaseModel
from typing import Optional

class Settings(BaseModel):
    """Environment-driven configuration.

    Defaults target local development: in-memory storage, uploads under
    ./uploads and LocalStack-style AWS credentials for the DynamoDB backend.
    """
    # Anthropic
    anthropic_api_key: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
    anthropic_model: str = os.getenv("ANTHROPIC_MODEL", "claude-3-7-sonnet-20250219")
    analysis_max_tokens: int = int(os.getenv("ANALYSIS_MAX_TOKENS", "1024"))
    analysis_timeout: float = float(os.getenv("ANALYSIS_TIMEOUT", "60"))
    output_language: str = os.getenv("OUTPUT_LANGUAGE", "Norwegian")

    # Uploads
    uploads_dir: str = os.getenv("UPLOADS_DIR", os.path.join(os.getcwd(), "uploads"))
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    max_image_width: int = int(os.getenv("MAX_IMAGE_WIDTH", "2000"))
    max_image_height: int = int(os.getenv("MAX_IMAGE_HEIGHT", "2000"))
    thumbnail_size: int = int(os.getenv("THUMBNAIL_SIZE", "200"))

    # Sessions
    session_secret: str = os.getenv("SESSION_SECRET", "auth-app-secret-key")
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", str(7 * 24 * 60 * 60)))

    # Storage: "memory" or "dynamodb"
    storage_backend: str = os.getenv("STORAGE_BACKEND", "memory")
    aws_access_key_id: str = os.getenv("AWS_ACCESS_KEY_ID", "test")
    aws_secret_access_key: str = os.getenv("AWS_SECRET_ACCESS_KEY", "test")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_endpoint_url: Optional[str] = os.getenv("AWS_ENDPOINT_URL")
    gallery_table_name: str = os.getenv("GALLERY_TABLE_NAME", "gallery")
    users_table_name: str = os.getenv("USERS_TABLE_NAME", "users")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def gallery_dir(self) -> str:
        return os.path.join(self.uploads_dir, "gallery")

    @property
    def thumbnails_dir(self) -> str:
        return os.path.join(self.uploads_dir, "thumbnails")

settings = Settings()
