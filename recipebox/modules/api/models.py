"""
RecipeBox shared data models.

These models define the structure of all data passed between the API
layer and the modules behind it.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..auth.credentials import USERNAME_PATTERN

# Request Models (API Input)


class Credentials(BaseModel):
    """Username/password pair for signup and signin."""

    username: str = Field(..., description="Account name", pattern=USERNAME_PATTERN)
    password: str = Field(..., description="Plaintext password", min_length=1, max_length=1024)


class RecipeInput(BaseModel):
    """Recipe fields a client may set."""

    name: str = Field(..., min_length=1, max_length=200)
    tags: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)


# Response Models (API Output)


class Recipe(RecipeInput):
    """A stored recipe."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Server-generated recipe identifier")
    published_at: datetime = Field(..., alias="publishedAt")


class MutationResponse(BaseModel):
    """Outcome of an update or delete."""

    message: str
    id: str
    found: bool


class TokenResponse(BaseModel):
    """Signed credential returned to the caller."""

    token: str
    expires: datetime


class SessionIssuedResponse(BaseModel):
    """Session credential confirmation; the reference itself is in a cookie."""

    message: str
    username: str
    expires: datetime


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[list] = None
