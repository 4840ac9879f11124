"""
Cache-aside coordination between the recipe store and the listing cache.

Listing state machine over the cache key:
- MISSING -> POPULATED: a read misses, loads from the store, writes the cache
- POPULATED -> MISSING: any accepted create/update/delete, both before the
  store write and again after it

The first invalidation means a write never reaches the store while the
cache is unreachable, and the second drops any listing a concurrent read
cached from the old collection in between. A write that fails after the
store commit still surfaces as an error, but the first invalidation has
already removed the old listing.

Known limitation: invalidation and repopulation are not transactional. If
the second invalidation fails, a listing cached by a read that raced the
write stays stale until the next write invalidates it.
"""

import logging
from typing import List, Optional

from ..api.models import Recipe, RecipeInput
from .cache import RecipeCache
from .store import RecipeStore

logger = logging.getLogger(__name__)


class RecipeService:
    """Recipe operations with read-through listing and invalidate-on-write."""

    def __init__(self, store: RecipeStore, cache: RecipeCache):
        self.store = store
        self.cache = cache

    async def list_recipes(self) -> List[Recipe]:
        cached = await self.cache.get_listing()
        if cached is not None:
            logger.debug("Recipe listing served from cache")
            return cached

        logger.info("Cache miss: recipe listing loaded from store")
        recipes = await self.store.list_all()
        await self.cache.store_listing(recipes)
        return recipes

    async def search(self, tag: str) -> List[Recipe]:
        return await self.store.find_by_tag(tag)

    async def create(self, data: RecipeInput) -> Recipe:
        await self.cache.invalidate()
        recipe = await self.store.insert(data)
        await self.cache.invalidate()
        logger.info(f"Recipe {recipe.id} created")
        return recipe

    async def update(self, recipe_id: str, data: RecipeInput) -> Optional[Recipe]:
        """Returns None (and leaves the cache alone) if the recipe does not exist."""
        if not await self.store.exists(recipe_id):
            return None

        await self.cache.invalidate()
        recipe = await self.store.update(recipe_id, data)
        if recipe is None:
            return None

        await self.cache.invalidate()
        logger.info(f"Recipe {recipe_id} updated")
        return recipe

    async def delete(self, recipe_id: str) -> bool:
        """Returns False (and leaves the cache alone) if the recipe does not exist."""
        if not await self.store.exists(recipe_id):
            return False

        await self.cache.invalidate()
        if not await self.store.delete(recipe_id):
            return False

        await self.cache.invalidate()
        logger.info(f"Recipe {recipe_id} deleted")
        return True
