"""
RecipeBox - Recipe Management API

A small recipe service whose interesting parts are authentication and the
cache-aside recipe listing.

Architecture:
- Each module is self-contained with clear interfaces
- Modules receive their collaborators through constructor injection
- One context object, built at startup, carries every shared handle

Modules:
- auth: Password hashing, credential store, signed tokens, auth facade
- session: Server-side session credentials
- middleware: Auth gate in front of protected routes
- recipes: Recipe document store and the listing cache
- storage: Redis connection lifecycle
- api: Request/response models
"""

__version__ = "1.0.0"
