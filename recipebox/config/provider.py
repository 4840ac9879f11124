"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

AUTH_STRATEGIES = ("session", "signed")


@dataclass
class APIConfig:
    """API configuration."""
    host: str
    port: int
    debug: bool
    log_level: str


@dataclass
class StorageConfig:
    """Redis locations for the authoritative store and the listing cache."""
    store_url: str
    cache_url: str


@dataclass
class AuthConfig:
    """Authentication configuration."""
    strategy: str
    jwt_secret: Optional[str]
    credential_ttl: int = 600
    refresh_ttl: int = 300
    refresh_threshold: int = 30
    bcrypt_rounds: int = 12
    cookie_name: str = "recipebox_session"
    cookie_secure: bool = False


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: int, minimum: int, maximum: Optional[int] = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise ValueError(f"{name} must be {bounds}, got {value}")
    return value


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=_env_int("API_PORT", 8080, minimum=1, maximum=65535),
            debug=_env_flag("API_DEBUG"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        store_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        return StorageConfig(
            store_url=store_url,
            cache_url=os.getenv("CACHE_REDIS_URL") or store_url,
        )

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        strategy = os.getenv("AUTH_STRATEGY", "signed").strip().lower()
        if strategy not in AUTH_STRATEGIES:
            raise ValueError(
                f"AUTH_STRATEGY must be one of {', '.join(AUTH_STRATEGIES)}, got {strategy!r}"
            )

        refresh_ttl = _env_int("REFRESH_TTL", 300, minimum=1)
        refresh_threshold = _env_int("REFRESH_THRESHOLD", 30, minimum=0)
        # A refreshed token must outlive the one it replaces
        if refresh_ttl <= refresh_threshold:
            raise ValueError(
                f"REFRESH_TTL ({refresh_ttl}) must be greater than REFRESH_THRESHOLD ({refresh_threshold})"
            )

        return AuthConfig(
            strategy=strategy,
            # Empty secret is treated as absent
            jwt_secret=os.getenv("JWT_SECRET") or None,
            credential_ttl=_env_int("CREDENTIAL_TTL", 600, minimum=1),
            refresh_ttl=refresh_ttl,
            refresh_threshold=refresh_threshold,
            bcrypt_rounds=_env_int("BCRYPT_ROUNDS", 12, minimum=4, maximum=31),
            cookie_name=os.getenv("SESSION_COOKIE_NAME", "recipebox_session"),
            cookie_secure=_env_flag("SESSION_COOKIE_SECURE"),
        )
