"""
Configuration management for Hangar.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///hangar.db')

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')


@dataclass(frozen=True)
class HttpConfig:
    """Shared settings for outbound HTTP calls."""
    timeout_seconds: float = float(os.getenv('HTTP_TIMEOUT_SECONDS', '10'))
    user_agent: str = 'Hangar/1.0'


@dataclass(frozen=True)
class FlightAwareConfig:
    """FlightAware AeroAPI configuration for flight and airport data."""
    api_key: Optional[str] = os.getenv('FLIGHTAWARE_API_KEY') or None
    base_url: str = os.getenv('FLIGHTAWARE_BASE_URL', 'https://aeroapi.flightaware.com/aeroapi')


@dataclass(frozen=True)
class FlickrConfig:
    """Flickr API configuration for aircraft photos."""
    api_key: Optional[str] = os.getenv('FLICKR_API_KEY') or None
    base_url: str = 'https://www.flickr.com/services/rest/'
    per_page: int = 10
    max_results: int = 5


@dataclass(frozen=True)
class CacheConfig:
    """In-memory cache settings."""
    image_ttl_seconds: int = int(os.getenv('IMAGE_CACHE_TTL_SECONDS', '1800'))
    max_entries: int = 500


@dataclass(frozen=True)
class PhotoConfig:
    """Aircraft photo enrichment policy."""
    refresh_days: int = int(os.getenv('PHOTO_REFRESH_DAYS', '7'))
    retry_seconds: int = int(os.getenv('PHOTO_RETRY_SECONDS', '3600'))
    max_attempts: int = 2
    workers: int = int(os.getenv('PHOTO_WORKERS', '2'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig
    http: HttpConfig
    flightaware: FlightAwareConfig
    flickr: FlickrConfig
    cache: CacheConfig
    photos: PhotoConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        http=HttpConfig(),
        flightaware=FlightAwareConfig(),
        flickr=FlickrConfig(),
        cache=CacheConfig(),
        photos=PhotoConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
