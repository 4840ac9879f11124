"""
Recipes Module - Black Box Interface

Purpose: Recipe storage behind a cache-aside listing
Interface: RecipeService.list_recipes(), search(), create(), update(), delete()
Hidden: Document layout, cache key, serialization

The store and the cache may live on different Redis instances.
"""

from .cache import LISTING_KEY, RecipeCache
from .service import RecipeService
from .store import RecipeStore

__all__ = ["LISTING_KEY", "RecipeCache", "RecipeService", "RecipeStore"]
