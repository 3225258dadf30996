# regionhub/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./regionhub.db"

    # Directory for uploaded photos and proof documents, served under /uploads
    UPLOAD_DIR: str = "static/uploads"

    # HTTP mail relay; notifications are only logged when unset
    NOTIFY_URL: Optional[str] = None
    NOTIFY_SENDER: str = "no-reply@regionhub.example.com"

    FRONTEND_URL: Optional[str] = None

    # Upper bound for waiting on a per-aggregate lock before failing the request
    LOCK_TIMEOUT_SECONDS: float = 10.0

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        # .env also carries seed-script values such as ADMIN_EMAIL
        extra: ClassVar[str] = "ignore"

settings = Settings()
