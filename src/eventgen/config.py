"""
Event Generator Configuration

Configuration class for the recurring event generation engine.
"""
import os
from pathlib import Path
from urllib.parse import quote_plus
from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


class Config:
    """Configuration class for the event generation engine"""

    # Base paths
    BASE_DIR = Path(__file__).parent.parent.parent
    MIGRATIONS_DIR = Path(__file__).parent / "migrations"

    # Database settings
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "events_site")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    # Explicit DSN wins over the individual DB_* settings
    POSTGRES_DSN = os.getenv("POSTGRES_DSN", "")

    # API settings
    API_HOST = os.getenv("API_HOST", "127.0.0.1")
    API_PORT = int(os.getenv("API_PORT", "5001"))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Periodic generation
    SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    GENERATION_CRON = os.getenv("GENERATION_CRON", "0 3 * * *")  # daily at 03:00
    GENERATION_RUN_ON_START = os.getenv("GENERATION_RUN_ON_START", "false").lower() == "true"
    GENERATION_MAX_WORKERS = int(os.getenv("GENERATION_MAX_WORKERS", "4"))

    # Template defaults
    DEFAULT_WEEKS_AHEAD = int(os.getenv("DEFAULT_WEEKS_AHEAD", "12"))

    @staticmethod
    def get_postgres_dsn() -> str:
        """Get PostgreSQL DSN with password handling"""
        if Config.POSTGRES_DSN:
            return Config.POSTGRES_DSN
        if Config.DB_PASSWORD:
            password = quote_plus(Config.DB_PASSWORD)
            return f"postgresql://{Config.DB_USER}:{password}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
        return f"postgresql://{Config.DB_USER}@{Config.DB_HOST}:{Config.DB_PORT}/{Config.DB_NAME}"
