# learnhub/core/config.py
import logging
from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE_PATH = BASE_DIR / ".env"

class Settings(BaseSettings):

    # Core
    DATABASE_URL: str
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    ENVIRONMENT: str = "development"
    START_PORT: int = 3000

    # Refresh Token
    REFRESH_SECRET_KEY: str
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # JWT registered claims
    JWT_ISSUER: str = "urn:learnhub:api"
    JWT_AUDIENCE: str = "urn:learnhub:client"

    # Frontend (redirect after OAuth login, CORS)
    FRONTEND_URL: str = "http://localhost:3000"

    # --- Yandex OAuth ---
    YANDEX_APP_ID: str
    YANDEX_APP_SECRET: str
    YANDEX_APP_CALLBACK: str = "http://localhost:3000/api/auth/yandex/callback"
    YANDEX_AUTHORIZE_URL: str = "https://oauth.yandex.ru/authorize"
    YANDEX_TOKEN_URL: str = "https://oauth.yandex.ru/token"
    YANDEX_USER_INFO_URL: str = "https://login.yandex.ru/info"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = 10.0
    # --- End Yandex ---

    # User directory cache
    USER_CACHE_TTL_SECONDS: int = 3600
    USER_CACHE_MAXSIZE: int = 4096

    # Code execution service
    EXECUTION_SERVICE_URL: str = "http://localhost:2000/api/v2/execute"
    EXECUTION_LANGUAGE: str = "python"
    EXECUTION_VERSION: str = "3.10.0"
    EXECUTION_TIMEOUT_SECONDS: float = 10.0

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    REFRESH_RATE_LIMIT: str = "6/minute"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        case_sensitive = True
        env_file = ENV_FILE_PATH
        env_file_encoding = 'utf-8'

try:
    settings = Settings()
except Exception as e:
    logging.error(f"FATAL: could not load 'settings' from .env at {ENV_FILE_PATH}: {e}")
    raise e
