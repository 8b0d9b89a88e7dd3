"""
Core Configuration Module

Centralizes environment configuration for the freight matching service.
Provides a singleton Settings object with defaults aligned to the FMCSA
lookup client and the JSON record store.

Usage:
    from freight_match.core.config import settings

    print(settings.APP_ENV)
    print(settings.FMCSA_BASE_URL)
"""

import os
from typing import List, Optional


class Settings:
    """
    Application settings loaded from environment variables.

    Properties are read on access so tests can override values with
    monkeypatch.setenv() without rebuilding the object.
    """

    # ==================== Application Settings ====================

    @property
    def APP_ENV(self) -> str:
        """Application environment: dev, staging, production"""
        return os.getenv("APP_ENV", "dev")

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""
        return os.getenv("LOG_LEVEL", "INFO")

    # ==================== FMCSA Lookup Service ====================

    @property
    def FMCSA_BASE_URL(self) -> str:
        """FMCSA QCMobile carriers API base URL"""
        return os.getenv(
            "FMCSA_BASE_URL",
            "https://mobile.fmcsa.dot.gov/qc/services/carriers"
        )

    @property
    def FMCSA_API_KEY(self) -> Optional[str]:
        """FMCSA webKey (sent as query parameter when set)"""
        return os.getenv("FMCSA_API_KEY") or None

    # ==================== HTTP Client Settings ====================

    @property
    def FMCSA_CLIENT_TIMEOUT(self) -> float:
        """Per-lookup timeout in seconds"""
        return float(os.getenv("FMCSA_CLIENT_TIMEOUT", "10.0"))

    @property
    def FMCSA_CLIENT_MAX_CONNECTIONS(self) -> int:
        """Maximum HTTP connections in pool"""
        return int(os.getenv("FMCSA_CLIENT_MAX_CONNECTIONS", "50"))

    @property
    def FMCSA_CLIENT_MAX_KEEPALIVE(self) -> int:
        """Maximum keepalive connections in pool"""
        return int(os.getenv("FMCSA_CLIENT_MAX_KEEPALIVE", "10"))

    # ==================== Geocoding Settings ====================

    @property
    def GEOCODER(self) -> str:
        """City resolution backend: geonames (offline dataset) or nominatim"""
        return os.getenv("GEOCODER", "geonames").lower()

    @property
    def GEONAMES_MIN_POPULATION(self) -> int:
        """Smallest city population in the GeoNames dataset (500, 1000, 5000, 15000)"""
        return int(os.getenv("GEONAMES_MIN_POPULATION", "15000"))

    @property
    def GEOCODER_USER_AGENT(self) -> str:
        """User agent sent to Nominatim"""
        return os.getenv("GEOCODER_USER_AGENT", "freight-match")

    @property
    def GEOCODER_TIMEOUT(self) -> float:
        """Per-request geocoder timeout in seconds"""
        return float(os.getenv("GEOCODER_TIMEOUT", "5.0"))

    # ==================== Cache Settings ====================

    @property
    def CARRIER_CACHE_TTL(self) -> int:
        """Carrier profile cache TTL in seconds (default 24h)"""
        return int(os.getenv("CARRIER_CACHE_TTL", "86400"))

    # ==================== Storage Settings ====================

    @property
    def DATA_DIR(self) -> str:
        """Directory holding the JSON record store"""
        return os.getenv("DATA_DIR", "./data")

    @property
    def DB_FILE(self) -> str:
        """Record store file name inside DATA_DIR"""
        return os.getenv("DB_FILE", "db.json")

    @property
    def DB_PATH(self) -> str:
        """Full path to the record store document"""
        return os.path.join(self.DATA_DIR, self.DB_FILE)

    # ==================== CORS Settings ====================

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Allowed CORS origins"""
        origins_str = os.getenv("CORS_ORIGINS", "*")
        if origins_str == "*":
            return ["*"]
        return [origin.strip() for origin in origins_str.split(",")]

    @property
    def CORS_ALLOW_CREDENTIALS(self) -> bool:
        """Allow credentials in CORS requests"""
        return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"


# ==================== Singleton Instance ====================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Returns:
        Settings object with configuration values

    Example:
        >>> from freight_match.core.config import get_settings
        >>> settings = get_settings()
        >>> settings.CARRIER_CACHE_TTL
        86400
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


# Convenience singleton for direct import
settings = get_settings()


# ==================== Helper Functions ====================

def is_production() -> bool:
    """
    Check if the application is running in production environment.

    Returns:
        True if APP_ENV is 'production' or 'prod'
    """
    env = settings.APP_ENV.lower()
    return env in ("production", "prod")


def is_development() -> bool:
    """
    Check if the application is running in development environment.

    Returns:
        True if APP_ENV is 'dev' or 'development'
    """
    env = settings.APP_ENV.lower()
    return env in ("dev", "development")
