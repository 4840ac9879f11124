"""
Storage Module - Black Box Interface

Purpose: Own the Redis connections behind every store
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling, response decoding

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from typing import Any, Callable, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: str, client_factory: Optional[Callable[..., Any]] = None):
        """
        Initialize storage with connection URL.

        Args:
            connection_url: Redis URL (redis://host:port/db)
            client_factory: Callable building a client from a URL; defaults to redis.from_url
        """
        self.url = connection_url
        self._client_factory = client_factory or redis.from_url
        self._client = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = self._client_factory(self.url, decode_responses=True)
            logger.info(f"Storage client created for {self._safe_url()}")
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _safe_url(self) -> str:
        # Drop credentials before logging
        return self.url.rsplit("@", 1)[-1]


__all__ = ["StorageModule"]
