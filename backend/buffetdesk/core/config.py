"""
Application Configuration
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import warnings

INSECURE_SECRET_KEYS = {
    "buffetdesk-dev-secret-change-me-in-production",
    "change-me",
    "secret-key",
}
MIN_SECRET_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "BuffetDesk API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./buffetdesk.db"
    AUTO_CREATE_TABLES: bool = True
    DB_TIMEOUT_SECONDS: float = 30.0  # sqlite busy timeout
    DB_STATEMENT_TIMEOUT_MS: int = 15000  # postgres statement_timeout
    DB_POOL_TIMEOUT: int = 10  # seconds to wait for a pooled connection

    # Security
    SECRET_KEY: str = "buffetdesk-dev-secret-change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours

    # Session cookie
    SESSION_COOKIE_NAME: str = "access_token"
    SESSION_COOKIE_SECURE: bool = False  # Set True in production with HTTPS
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = "lax"

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Inventory and ledger policy
    ALLOW_NEGATIVE_STOCK: bool = False
    CASHFLOW_AUTO_RECORD: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def database_url(self) -> str:
        """Get properly formatted database URL"""
        url = self.DATABASE_URL
        if url.startswith("file:"):
            return f"sqlite:///{url[5:]}"
        # Heroku-style URLs are rejected by SQLAlchemy 2.x
        if url.startswith("postgres://"):
            return "postgresql://" + url[len("postgres://"):]
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"

    def validate_security_settings(self) -> bool:
        """
        Check for insecure or risky settings.

        Problems are fatal in production (ValueError) and downgraded to
        UserWarning everywhere else.
        """
        problems = []
        if self.SECRET_KEY in INSECURE_SECRET_KEYS:
            problems.append("default SECRET_KEY in use; set the SECRET_KEY environment variable")
        if len(self.SECRET_KEY) < MIN_SECRET_KEY_LENGTH:
            problems.append(f"SECRET_KEY should be at least {MIN_SECRET_KEY_LENGTH} characters")
        if self.is_production and self.DEBUG:
            problems.append("DEBUG is enabled")

        if self.is_production and problems:
            raise ValueError("Refusing to start in production: " + "; ".join(problems))
        for problem in problems:
            warnings.warn(problem, UserWarning)

        # Advisory only, even in production
        if self.is_production and not self.SESSION_COOKIE_SECURE:
            warnings.warn("SESSION_COOKIE_SECURE is False; session cookies will travel over plain HTTP", UserWarning)
        if self.is_production and self.ALLOW_NEGATIVE_STOCK:
            warnings.warn("ALLOW_NEGATIVE_STOCK is on; out movements can overdraw inventory", UserWarning)

        return True
