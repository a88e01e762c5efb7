from pathlib import Path
from typing import Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # App
    APP_ENV: str = "development"
    APP_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Database (SQLite file; DATABASE_URL wins when set explicitly)
    DB_PATH: str = "./database/gym.db"
    DATABASE_URL: str = ""

    @model_validator(mode="after")
    def derive_database_url(self) -> "Settings":
        if not self.DATABASE_URL:
            path = Path(self.DB_PATH)
            path.parent.mkdir(parents=True, exist_ok=True)
            self.DATABASE_URL = f"sqlite+aiosqlite:///{path}"
        elif self.DATABASE_URL.startswith("sqlite://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return self

    # JWT
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12

    # Rate limiting
    LOGIN_RATE_LIMIT: str = "10/minute"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Resend (optional, empty API key disables sending)
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@gymdesk.local"

    @property
    def resend_enabled(self) -> bool:
        return bool(self.RESEND_API_KEY)

    # Business rules
    TAX_RATE: float = 0.16
    MEMBERSHIP_ALERT_DAYS: int = 7
    PRODUCT_ALERT_DAYS: int = 15
    MAINTENANCE_ALERT_DAYS: int = 7
    RESET_CODE_TTL_MINUTES: int = 15
    RESET_CODE_MAX_ATTEMPTS: int = 5
    DEFAULT_ADMIN_PASSWORD: str = "admin123"


settings = Settings()
