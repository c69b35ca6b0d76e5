from datetime import datetime
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "TeamSync"
    API_V1_STR: str = "/api/v1"

    MONGODB_URL: str
    DATABASE_NAME: str = "teamsync"

    # Redis Cache Settings
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_PREFIX: str = "ts:"
    CACHE_DEFAULT_TTL_HOURS: int = 24
    DASHBOARD_CACHE_TTL_SECONDS: int = 60

    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Event timeline
    TEAM_FORMATION_DEADLINE: Optional[datetime] = None
    HACKATHON_END_DATE: Optional[datetime] = None

    # Membership rules
    INVITE_EXPIRY_HOURS: int = 48
    SOLO_BOOST_DAYS: int = 3
    TEAM_LOCK_TTL_SECONDS: int = 30
    TEAM_LOCK_WAIT_SECONDS: float = 5.0

    # Automation
    AUTOMATION_ENABLED: bool = True
    AUTOMATION_INTERVAL_MINUTES: int = 60

    # Generative text (Gemini REST API)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 15.0

    # Email
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAILS_FROM_EMAIL: str = "noreply@teamsync.local"

    # Frontend
    FRONTEND_BASE_URL: str = "http://localhost:5173"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
