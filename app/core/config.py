# app/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, List

class Settings(BaseSettings):
    DATABASE_URL: str
    DATABASE_NAME: str = "event_registration"
    DB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    RATE_LIMITING_ENABLED: bool = False
    REDIS_URL: str = "redis://localhost:6379"

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # JSON object mapping admin email -> bcrypt hash, e.g.
    # ADMIN_CREDENTIALS='{"admin@binus.ac.id": "$2b$12$..."}'
    ADMIN_CREDENTIALS: Dict[str, str] = {}

    # A comma-separated string of allowed frontend origins for CORS.
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:5174"

    LOG_FILE: str = "api.log"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def admin_credentials(self) -> Dict[str, str]:
        # Admin emails are matched case-insensitively.
        return {email.strip().lower(): hashed for email, hashed in self.ADMIN_CREDENTIALS.items()}

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
