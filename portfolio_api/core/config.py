from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio API"
    API_PREFIX: str = "/api"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "production"  # "development" exposes error details in 500 responses

    DATABASE_URL: str = "sqlite:///./portfolio.db"

    # Shared secret for admin endpoints. Empty disables admin access entirely.
    ADMIN_PASSWORD: str = ""
    ADMIN_LOCKOUT_THRESHOLD: int = 5
    ADMIN_LOCKOUT_SECONDS: int = 300

    # Contact form throttling (per client IP)
    CONTACT_RATE_LIMIT_MAX: int = 5
    CONTACT_RATE_LIMIT_WINDOW_SECONDS: int = 900  # 15 minutes

    # Resend Email
    RESEND_API_KEY: str = ""
    FROM_EMAIL: str = "Portfolio Contact <noreply@justdatthang.com>"
    ADMIN_EMAIL: str = ""
    CONTACT_NOTIFY_EMAIL: str = ""  # Falls back to ADMIN_EMAIL

    # Frontend URL for CORS and email links
    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",  # Vite default
        "http://localhost:3000",
        "https://justdatthang.com",
        "https://www.justdatthang.com",
    ]

    # Proxies allowed to set X-Forwarded-For; every other peer is taken as the client
    FORWARDED_ALLOW_IPS: List[str] = ["127.0.0.1"]

    DEFAULT_AUTHOR: str = "Thanh Dat Tran"

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


settings = Settings()
