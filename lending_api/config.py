from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Get the project directory (parent of the lending_api package)
PROJECT_DIR = Path(__file__).parent.parent
ENV_FILE = PROJECT_DIR / ".env"

class Settings(BaseSettings):
    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # PostgreSQL settings - used only when db_name is set, otherwise SQLite
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: Optional[str] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None  # Confidential, from .env

    # Database SSL settings (PostgreSQL)
    db_ssl_mode: str = "prefer"  # Options: disable, allow, prefer, require, verify-ca, verify-full
    db_ssl_cert: Optional[str] = None  # Path to client certificate
    db_ssl_key: Optional[str] = None  # Path to client key
    db_ssl_root_cert: Optional[str] = None  # Path to root certificate

    # SQLite fallback
    sqlite_path: str = "library.db"
    sqlite_timeout: float = 30.0  # Seconds a writer waits for the database lock

    # JWT settings - confidential values from .env
    jwt_secret_key: str  # Required from .env (confidential - no default)
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: Optional[int] = None  # None: tokens carry no exp claim

    # Password hashing
    bcrypt_rounds: int = 12

    # Lending policy
    loan_period_days: int = 14
    timezone: str = "UTC"  # pytz zone name used for all timestamps

    # Accounts
    allow_admin_signup: bool = True  # Public /register may create admin accounts
    bootstrap_admin_username: Optional[str] = None  # Admin created at startup if missing
    bootstrap_admin_password: Optional[str] = None

    class Config:
        env_file = str(ENV_FILE) if ENV_FILE.exists() else ".env"
        case_sensitive = False

settings = Settings()
