import os
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings."""

    def __init__(self):
        # API configuration
        self.API_PREFIX: str = os.getenv("API_PREFIX", "/api")

        # Project metadata
        self.PROJECT_NAME: str = "querygate"
        self.PROJECT_DESCRIPTION: str = (
            "Database query proxy with persisted connection profiles."
        )
        self.VERSION: str = "0.1.0"

        # CORS configuration
        self.CORS_ORIGINS: List[str] = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS", "http://localhost:3000,http://localhost:8080"
            ).split(",")
            if origin.strip()
        ]

        # State database (profiles and active selection live here)
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./querygate.db")

        # Proxy behaviour
        self.CONNECT_TIMEOUT_SECONDS: int = int(os.getenv("CONNECT_TIMEOUT_SECONDS", "5"))
        self.MONGO_RESULT_LIMIT: int = int(os.getenv("MONGO_RESULT_LIMIT", "1000"))

        # Profile persistence
        self.PROFILE_RECORD_MAX_AGE_DAYS: int = int(
            os.getenv("PROFILE_RECORD_MAX_AGE_DAYS", "365")
        )
        # Fernet key; profiles are stored unencrypted when unset
        self.PROFILE_ENCRYPTION_KEY: Optional[str] = os.getenv("PROFILE_ENCRYPTION_KEY")

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
