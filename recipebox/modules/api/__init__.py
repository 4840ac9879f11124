"""
API Module - Black Box Interface

Purpose: Request and response shapes of the HTTP interface
Interface: Pydantic models
Hidden: Field validation rules

The API layer only orchestrates - it contains no business logic.
"""

from .models import (
    Credentials,
    ErrorResponse,
    MessageResponse,
    MutationResponse,
    Recipe,
    RecipeInput,
    SessionIssuedResponse,
    TokenResponse,
)

__all__ = [
    "Credentials",
    "ErrorResponse",
    "MessageResponse",
    "MutationResponse",
    "Recipe",
    "RecipeInput",
    "SessionIssuedResponse",
    "TokenResponse",
]
