"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: ConfigProvider, EnvConfigProvider, typed config dataclasses
Hidden: Environment parsing, defaults, range validation

Can be replaced with a different provider (files, secret managers) as long
as it returns the same dataclasses.
"""

from .provider import (
    APIConfig,
    AuthConfig,
    ConfigProvider,
    EnvConfigProvider,
    StorageConfig,
)

__all__ = [
    "APIConfig",
    "AuthConfig",
    "ConfigProvider",
    "EnvConfigProvider",
    "StorageConfig",
]
