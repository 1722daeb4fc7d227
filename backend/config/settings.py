from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path

# Get absolute path to backend directory (config/settings.py -> backend/)
_backend_dir = Path(__file__).parent.parent
_env_local = _backend_dir / '.env.local'
_env_file = _backend_dir / '.env'


class Settings(BaseSettings):
    """Application settings"""

    # Database Configuration
    DATABASE_URL: str = ""  # PostgreSQL connection string (production)
    TEST_DATABASE_URL: str = ""  # Optional separate database for local runs

    # Shared secret the scheduler sends as "Authorization: Bearer <secret>"
    CRON_SECRET: str = ""
    # Bearer token for the operator (admin) enrichment endpoints
    ADMIN_API_TOKEN: str = ""

    # Enrichment queue
    ENRICH_BATCH_SIZE: int = 10
    STUCK_JOB_TIMEOUT_MINUTES: int = 15

    # Scraper / sources
    ENABLED_SOURCES: str = ""  # Comma-separated source names, empty = all available
    MAX_POSTINGS_PER_SOURCE: int = 50
    SOURCE_TIMEOUT_SECONDS: float = 15.0
    SOURCE_FETCH_RETRIES: int = 3
    SOURCE_RETRY_DELAY_SECONDS: float = 1.0
    USER_AGENT: str = "JobEnrichmentPipeline/1.0 (job-aggregator)"

    # Keyed sources (skipped when the key is empty)
    REED_API_KEY: str = ""
    ADZUNA_APP_ID: str = ""
    ADZUNA_API_KEY: str = ""
    RAPIDAPI_KEY: str = ""
    MUSE_API_KEY: str = ""  # Optional: The Muse works without one, with a lower rate limit

    class Config:
        # Prioritize .env.local for local development, fallback to .env
        # Use absolute paths to avoid working directory issues
        env_file = str(_env_local) if _env_local.exists() else str(_env_file)
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields from environment file

    def get_enabled_sources(self) -> List[str]:
        """Parse and return enabled source names as a list (empty = all)"""
        return [name.strip().lower() for name in self.ENABLED_SOURCES.split(",") if name.strip()]

    def get_api_key(self, env_key: str) -> str:
        """Look up an API key setting by its env var name ("" if unknown)"""
        return str(getattr(self, env_key, "") or "")


settings = Settings()
