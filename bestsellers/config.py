"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Database
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "bestsellers")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Build PostgreSQL connection string."""
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # Upstream list files
    BESTSELLER_BASE_URL = os.getenv(
        "BESTSELLER_BASE_URL",
        "https://www.bookweb.org/sites/default/files/regional_bestseller/"
    )
    DEFAULT_REGION = os.getenv("DEFAULT_REGION", "PNBA")

    @property
    def PROXIES(self):
        """Proxy URL prefixes to try in order, e.g. "https://proxy/fetch?url="."""
        raw = os.getenv("BESTSELLER_PROXIES", "")
        return [proxy.strip() for proxy in raw.split(",") if proxy.strip()]

    # Defaults
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))
    DEFAULT_MAX_RETRIES = int(os.getenv("DEFAULT_MAX_RETRIES", "3"))
    DEFAULT_CACHE_TTL = int(os.getenv("DEFAULT_CACHE_TTL", "604800"))
    WEEKS_CACHE_TTL = int(os.getenv("WEEKS_CACHE_TTL", "1800"))
