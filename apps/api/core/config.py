"""
Settings for the training API, read from the environment (and .env).

Import the module-level ``settings``; nothing else reads os.environ.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Database. DATABASE_URL overrides the POSTGRES_* parts (e.g. "sqlite://" in tests)
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "social_runner"
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 1800  # seconds

    # HS256 key shared with the web app that issues runner tokens (32+ chars)
    SECRET_KEY: str = Field(..., min_length=1)

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_RELOAD: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    # Run the automatic difficulty check after each feedback submission
    AUTO_ADJUST_ON_FEEDBACK: bool = True

    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Comma-separated, e.g. "https://thesocialrunner.com,https://www.thesocialrunner.com"
    CORS_ORIGINS: Optional[str] = None

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


settings = Settings()
