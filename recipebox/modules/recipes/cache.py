"""
Read-through cache for the full recipe listing.

One fixed key holds the serialized listing. It has no TTL: it is filled on
the first read miss and deleted by every accepted write.
"""

import logging
from typing import List, Optional

import redis.asyncio as redis
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..api.models import Recipe

logger = logging.getLogger(__name__)

LISTING_KEY = "recipes"

_listing_adapter = TypeAdapter(List[Recipe])


class RecipeCache:
    def __init__(self, redis_client, key: str = LISTING_KEY):
        """
        Initialize recipe listing cache.

        Args:
            redis_client: Async Redis client for the cache
            key: Cache key holding the listing
        """
        self.redis = redis_client
        self.key = key

    async def get_listing(self) -> Optional[List[Recipe]]:
        """
        Return the cached listing, or None on a miss.

        An unreadable entry is deleted and reported as a miss.
        """
        data = await self.redis.get(self.key)
        if data is None:
            return None

        try:
            return _listing_adapter.validate_json(data)
        except PydanticValidationError:
            logger.warning(f"Dropping unreadable cache entry '{self.key}'")
            await self.redis.delete(self.key)
            return None

    async def store_listing(self, recipes: List[Recipe]) -> bool:
        """
        Populate the cache. Best-effort: a failed write is logged and the
        caller still serves the listing it read from the store.

        Returns:
            True if the listing was cached
        """
        try:
            await self.redis.set(self.key, _listing_adapter.dump_json(recipes, by_alias=True))
        except redis.RedisError as e:
            logger.warning(f"Could not repopulate cache key '{self.key}': {e}")
            return False
        return True

    async def invalidate(self) -> None:
        """Delete the cached listing so the next read goes to the store."""
        await self.redis.delete(self.key)
        logger.info(f"Cache key '{self.key}' invalidated")
