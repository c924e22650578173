from pydantic_settings import BaseSettings
from typing import Optional, List
import os

class Settings(BaseSettings):
    # AI Configuration - Groq
    GROQ_API_KEY: str = ""
    GROQ_MODEL: str = "meta-llama/llama-4-scout-17b-16e-instruct"  # Vision-capable model
    AI_MAX_TOKENS: int = 2000
    AI_TEMPERATURE: float = 0.1  # Low temperature for consistent extraction
    AI_TIMEOUT_SECONDS: float = 30.0
    ENABLE_AI_ANALYSIS: bool = False  # Gates analysis on full intake submissions

    # Upload Configuration
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    MAX_FILES_PER_UPLOAD: int = 10
    ALLOWED_CONTENT_TYPES: List[str] = [
        'application/pdf',
        'image/jpeg',
        'image/jpg',
        'image/png',
        'text/plain',
    ]
    UPLOAD_DIR: str = "uploads"
    DATA_DIR: str = "data"

    # S3 storage (local filesystem is used when these are not set)
    AWS_S3_BUCKET: str = ""
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = True
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "logs/filing_intake.log"

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Create directories if they don't exist
        os.makedirs(self.UPLOAD_DIR, exist_ok=True)
        os.makedirs(self.DATA_DIR, exist_ok=True)

    @property
    def s3_configured(self) -> bool:
        return bool(self.AWS_S3_BUCKET and self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)

settings = Settings()
