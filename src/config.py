"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_ALLOWED_DOMAINS = ",".join([
    "www.dentons.com",
    "s10-www.dentons.com",
    "www.preview.dentons.com",
    "s10-nacd1.dentons.com",
    "s10-eucd1.dentons.com",
    "s10-nacd2.dentons.com",
    "s10-pg.dentons.com",
    "uat-www.dentons.com",
    "uat-www.preview.dentons.com",
    "uat-nacd1.dentons.com",
    "uat-eucd1.dentons.com",
])


def _split(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Config:
    """Application configuration."""

    # Upstream listing services
    MAIN_DOMAIN: str = os.getenv("MAIN_DOMAIN", "www.dentons.com")
    ALLOWED_DOMAINS: set[str] = set(_split(os.getenv("ALLOWED_DOMAINS", DEFAULT_ALLOWED_DOMAINS)))
    CONTEXT_LANGUAGE: str = os.getenv("CONTEXT_LANGUAGE", "en")
    CONTEXT_SITE: str = os.getenv("CONTEXT_SITE", "dentons")
    DEFAULT_LEFT_DOMAIN: str = os.getenv("DEFAULT_LEFT_DOMAIN", "s10-nacd1.dentons.com")
    DEFAULT_RIGHT_DOMAIN: str = os.getenv("DEFAULT_RIGHT_DOMAIN", "s10-eucd1.dentons.com")

    # Forward all listing calls through another instance of this service
    PROXY_URL: str | None = os.getenv("PROXY_URL") or os.getenv("DENTONS_PROXY_URL")

    # Fetching
    TIMEOUT: float = float(os.getenv("TIMEOUT", "30"))
    TOTALS_TIMEOUT: float = float(os.getenv("TOTALS_TIMEOUT", "15"))
    CONCURRENCY: int = int(os.getenv("CONCURRENCY", "15"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "2"))
    RETRY_BASE_DELAY: float = float(os.getenv("RETRY_BASE_DELAY", "0.5"))

    # Scanning
    FALLBACK_PAGE_SIZES: list[int] = [int(size) for size in _split(os.getenv("FALLBACK_PAGE_SIZES", "100,50,20"))]
    DEFAULT_BATCH_SIZE: int = int(os.getenv("DEFAULT_BATCH_SIZE", "100"))
    MAX_BATCH_SIZE: int = int(os.getenv("MAX_BATCH_SIZE", "200"))
    DEFAULT_MAX_PAGES: int = int(os.getenv("DEFAULT_MAX_PAGES", "150"))
    MAX_PAGES_CAP: int = int(os.getenv("MAX_PAGES_CAP", "300"))
    DISPLAY_LIMIT: int = int(os.getenv("DISPLAY_LIMIT", "0"))  # 0 = no cap

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        errors = []
        if cls.CONCURRENCY < 1:
            errors.append("CONCURRENCY must be >= 1")
        if cls.MAX_RETRIES < 0:
            errors.append("MAX_RETRIES must be >= 0")
        if not cls.FALLBACK_PAGE_SIZES or any(size < 1 for size in cls.FALLBACK_PAGE_SIZES):
            errors.append("FALLBACK_PAGE_SIZES must be a non-empty list of positive integers")
        if cls.DEFAULT_BATCH_SIZE < 1 or cls.DEFAULT_BATCH_SIZE > cls.MAX_BATCH_SIZE:
            errors.append("DEFAULT_BATCH_SIZE must be between 1 and MAX_BATCH_SIZE")
        if cls.DEFAULT_MAX_PAGES < 1 or cls.DEFAULT_MAX_PAGES > cls.MAX_PAGES_CAP:
            errors.append("DEFAULT_MAX_PAGES must be between 1 and MAX_PAGES_CAP")
        if cls.TIMEOUT <= 0 or cls.TOTALS_TIMEOUT <= 0:
            errors.append("TIMEOUT and TOTALS_TIMEOUT must be positive")
        if not cls.ALLOWED_DOMAINS:
            errors.append("ALLOWED_DOMAINS must not be empty")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
