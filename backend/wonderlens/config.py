from typing import Optional
from pydantic_settings import BaseSettings

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "https://wonderlensai-core.vercel.app",
    "https://www.wonderlens.app",
    "https://wonderlens.app",
]

class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+psycopg://user:password@db/wonderlens"

    AWS_ENDPOINT_URL: Optional[str] = None
    AWS_ACCESS_KEY_ID: str
    AWS_SECRET_ACCESS_KEY: str
    AWS_REGION_NAME: str = "us-east-1"
    S3_BUCKET_NAME: str = "scan-media"
    S3_PUBLIC_BASE_URL: Optional[str] = None

    OPENAI_API_KEY: str
    OPENAI_BASE_URL: Optional[str] = None

    VISION_MODEL: str = "gpt-4.1"
    VISION_MAX_TOKENS: int = 700
    VISION_TEMPERATURE: float = 0.7
    VISION_TOP_P: float = 0.9

    CONTENT_MODEL: str = "gpt-4o"
    NEWS_MAX_TOKENS: int = 800
    QUIZ_MAX_TOKENS: int = 1500
    QUIZ_TEMPERATURE: float = 0.7
    NEWS_RETENTION_DAYS: int = 14

    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/0"

    PORT: int = 7001
    MAX_BODY_BYTES: int = 50 * 1024 * 1024

    class Config:
        env_file = ".env"

settings = Settings()
