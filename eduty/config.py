"""
Application configuration. Loads from environment variables.
Secrets and sensitive config must never be hardcoded.
"""

import os

from dotenv import load_dotenv

load_dotenv()
from functools import lru_cache


@lru_cache(maxsize=1)
def get_settings() -> "Settings":
    """Return cached settings instance."""
    return Settings()


class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "EDuty API"
    debug: bool = False
    environment: str = "development"
    port: int = 3001

    # Database (postgresql+psycopg for psycopg3)
    database_url: str = "postgresql+psycopg://localhost:5432/eduty_dev"
    db_connect_timeout: int = 10  # seconds

    # Identity provider (Supabase Auth)
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    identity_timeout: float = 10.0  # seconds; calls past this are treated as failures
    strict_identity_lookups: bool = False  # refuse invitations when the provider cannot answer

    # CORS: comma-separated FRONTEND_URL
    allowed_origins: list[str] = ()

    def __init__(self) -> None:
        self.app_name = os.getenv("APP_NAME", self.app_name)
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.environment = os.getenv("ENVIRONMENT", self.environment).strip().lower()
        self.port = int(os.getenv("PORT", str(self.port)))

        default_user = os.getenv("PGUSER") or os.getenv("USER") or "postgres"
        default_url = (
            f"postgresql+psycopg://{default_user}:"
            f"{os.getenv('PGPASSWORD', '')}@"
            f"{os.getenv('PGHOST', 'localhost')}:"
            f"{os.getenv('PGPORT', '5432')}/"
            f"{os.getenv('PGDATABASE', 'eduty_dev')}"
        )
        raw_url = os.getenv("DATABASE_URL", default_url)
        # Ensure psycopg3 driver if URL uses generic postgresql:// or postgres://
        if raw_url.startswith("postgres://"):
            raw_url = raw_url.replace("postgres://", "postgresql://", 1)
        if raw_url.startswith("postgresql://"):
            raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
        self.database_url = raw_url
        self.db_connect_timeout = int(os.getenv("DB_CONNECT_TIMEOUT", str(self.db_connect_timeout)))

        self.supabase_url = os.getenv("SUPABASE_URL", "").rstrip("/")
        self.supabase_service_role_key = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        self.identity_timeout = float(os.getenv("IDENTITY_TIMEOUT", str(self.identity_timeout)))
        self.strict_identity_lookups = (
            os.getenv("STRICT_IDENTITY_LOOKUPS", "false").lower() == "true"
        )

        _origins = os.getenv("FRONTEND_URL", "http://localhost:3000").strip()
        self.allowed_origins = [o.strip() for o in _origins.split(",") if o.strip()]

    @property
    def is_postgres(self) -> bool:
        return self.database_url.startswith("postgresql")

    def is_production(self) -> bool:
        return self.environment == "production"

    def is_production_like(self) -> bool:
        """Production or staging (non-development environments)."""
        return self.environment in ("production", "staging")

    def is_development(self) -> bool:
        return self.environment == "development"
