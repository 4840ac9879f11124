"""
Authoritative recipe document store.

Each recipe is one JSON document under ``recipe:{id}``; the set
``recipes:ids`` indexes them. Single-key writes use NX/XX so create never
overwrites and update never resurrects a deleted recipe.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..api.models import Recipe, RecipeInput

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class RecipeStore:
    def __init__(
        self,
        redis_client,
        key_prefix: str = "recipe",
        index_key: str = "recipes:ids",
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize recipe store.

        Args:
            redis_client: Async Redis client for the authoritative store
            key_prefix: Namespace for recipe documents
            index_key: Set holding every recipe id
            clock: Returns the current UTC time (publish timestamps)
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.index_key = index_key
        self.clock = clock

    def _key(self, recipe_id: str) -> str:
        return f"{self.key_prefix}:{recipe_id}"

    def _decode(self, recipe_id: str, data: str) -> Optional[Recipe]:
        try:
            return Recipe.model_validate_json(data)
        except PydanticValidationError:
            logger.error(f"Skipping unreadable recipe document {recipe_id}")
            return None

    async def insert(self, data: RecipeInput) -> Recipe:
        """
        Store a new recipe.

        Returns:
            The stored recipe with its generated id and publish time
        """
        recipe = Recipe(
            id=str(uuid.uuid4()),
            published_at=self.clock(),
            **data.model_dump(),
        )

        await self.redis.set(self._key(recipe.id), recipe.model_dump_json(by_alias=True), nx=True)
        await self.redis.sadd(self.index_key, recipe.id)

        return recipe

    async def list_all(self) -> List[Recipe]:
        """Return every recipe, oldest first."""
        recipe_ids = sorted(await self.redis.smembers(self.index_key))
        if not recipe_ids:
            return []

        documents = await self.redis.mget([self._key(recipe_id) for recipe_id in recipe_ids])

        recipes = []
        for recipe_id, data in zip(recipe_ids, documents):
            if data is None:
                # Clean up stale entry
                await self.redis.srem(self.index_key, recipe_id)
                continue
            recipe = self._decode(recipe_id, data)
            if recipe is not None:
                recipes.append(recipe)

        recipes.sort(key=lambda r: (r.published_at, r.id))
        return recipes

    async def find_by_tag(self, tag: str) -> List[Recipe]:
        """Return recipes carrying tag."""
        return [recipe for recipe in await self.list_all() if tag in recipe.tags]

    async def exists(self, recipe_id: str) -> bool:
        return await self.redis.exists(self._key(recipe_id)) > 0

    async def get(self, recipe_id: str) -> Optional[Recipe]:
        data = await self.redis.get(self._key(recipe_id))
        if data is None:
            return None
        return self._decode(recipe_id, data)

    async def update(self, recipe_id: str, data: RecipeInput) -> Optional[Recipe]:
        """
        Replace the editable fields of a recipe.

        Returns:
            The updated recipe, or None if no recipe has that id
        """
        current = await self.get(recipe_id)
        if current is None:
            return None

        updated = current.model_copy(update=data.model_dump())
        written = await self.redis.set(
            self._key(recipe_id), updated.model_dump_json(by_alias=True), xx=True
        )
        if not written:
            # Deleted between read and write
            return None

        return updated

    async def delete(self, recipe_id: str) -> bool:
        """
        Delete a recipe.

        Returns:
            True if a recipe was deleted, False if none had that id
        """
        removed = await self.redis.delete(self._key(recipe_id))
        await self.redis.srem(self.index_key, recipe_id)
        return removed > 0
