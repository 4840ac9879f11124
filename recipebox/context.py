"""
Application context and composition root.

Every shared handle (store clients, cache client, services) is built here
once at startup and handed to the API layer as a single object. Nothing is
reached through module-level globals.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .config.provider import AuthConfig, ConfigProvider
from .modules.auth import (
    AuthenticationService,
    BearerTransport,
    CookieTransport,
    CredentialStore,
    CredentialStrategy,
    PasswordHasher,
    SignedTokenStrategy,
)
from .modules.recipes import RecipeCache, RecipeService, RecipeStore
from .modules.session import SessionStrategy
from .modules.storage import StorageModule

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide handles shared by all requests."""
    store_storage: StorageModule
    cache_storage: StorageModule
    store_client: Any
    cache_client: Any
    auth: AuthenticationService
    recipes: RecipeService

    @property
    def strategy(self) -> CredentialStrategy:
        return self.auth.strategy

    async def close(self) -> None:
        await self.cache_storage.disconnect()
        await self.store_storage.disconnect()


class AuthFactory:
    """
    Factory for building the authentication stack.

    This is the composition root that:
    - Picks exactly one credential strategy from configuration
    - Wires store, hasher and strategy together via dependency injection
    - Returns only the service facade
    """

    @staticmethod
    def build_strategy(
        auth_config: AuthConfig,
        redis_client: Any,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> CredentialStrategy:
        """
        Build the configured credential strategy.

        Args:
            auth_config: Authentication configuration
            redis_client: Async Redis client for server-side session state
            clock: Optional clock override (tests)

        Returns:
            SessionStrategy or SignedTokenStrategy
        """
        extra = {"clock": clock} if clock else {}

        if auth_config.strategy == "session":
            logger.info("Building authentication stack with server-side sessions")
            return SessionStrategy(
                redis_client,
                credential_ttl=auth_config.credential_ttl,
                refresh_ttl=auth_config.refresh_ttl,
                transport=CookieTransport(auth_config.cookie_name, secure=auth_config.cookie_secure),
                **extra,
            )

        if auth_config.strategy == "signed":
            logger.info("Building authentication stack with signed tokens")
            if not auth_config.jwt_secret:
                logger.error("JWT_SECRET is not set - every signed token will be rejected")
            return SignedTokenStrategy(
                auth_config.jwt_secret,
                credential_ttl=auth_config.credential_ttl,
                refresh_ttl=auth_config.refresh_ttl,
                refresh_threshold=auth_config.refresh_threshold,
                transport=BearerTransport(),
                **extra,
            )

        raise ValueError(f"Unknown credential strategy: {auth_config.strategy}")

    @staticmethod
    def build(
        auth_config: AuthConfig,
        redis_client: Any,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> AuthenticationService:
        """
        Build the complete authentication stack.

        Returns:
            AuthenticationService facade
        """
        return AuthenticationService(
            credential_store=CredentialStore(redis_client),
            hasher=PasswordHasher(rounds=auth_config.bcrypt_rounds),
            strategy=AuthFactory.build_strategy(auth_config, redis_client, clock),
        )


async def build_context(
    config_provider: ConfigProvider,
    client_factory: Optional[Callable[..., Any]] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> AppContext:
    """
    Connect to the stores and build every module.

    Args:
        config_provider: Configuration provider
        client_factory: Optional Redis client factory (defaults to redis.from_url)
        clock: Optional clock override for credential expiry (tests)
    """
    storage_config = config_provider.get_storage_config()
    auth_config = config_provider.get_auth_config()

    store_storage = StorageModule(storage_config.store_url, client_factory)
    cache_storage = StorageModule(storage_config.cache_url, client_factory)
    store_client = await store_storage.connect()
    cache_client = await cache_storage.connect()

    return AppContext(
        store_storage=store_storage,
        cache_storage=cache_storage,
        store_client=store_client,
        cache_client=cache_client,
        auth=AuthFactory.build(auth_config, store_client, clock),
        recipes=RecipeService(RecipeStore(store_client), RecipeCache(cache_client)),
    )
