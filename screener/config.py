# screener/config.py

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Manages application-wide settings loaded from the environment or a .env file.
    """
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra='ignore')

    # --- Core Application Settings ---
    APP_ENV: str = "dev"
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    # --- Supabase ---
    SUPABASE_URL: Optional[str] = None
    # Public key used by the browser client; never enough for the admin paths.
    SUPABASE_ANON_KEY: Optional[str] = None
    # Privileged key. Account deletion refuses to run without it.
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # --- Access token verification (Supabase issues HS256 tokens) ---
    SUPABASE_JWT_SECRET: Optional[str] = None
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # --- Database ---
    # When set, resource deletes go straight to Postgres inside real transactions.
    DATABASE_URL: Optional[str] = None

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()

    @property
    def has_service_key(self) -> bool:
        return bool(self.SUPABASE_SERVICE_ROLE_KEY)

    def service_key_preview(self) -> str:
        """Masked form of the service key, safe to show in diagnostics."""
        key = self.SUPABASE_SERVICE_ROLE_KEY
        if not key:
            return "NOT SET"
        if len(key) <= 8:
            return "***"
        return f"{key[:4]}...{key[-4:]}"


settings = Settings()
