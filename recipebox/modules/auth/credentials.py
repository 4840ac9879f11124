"""
Credential store: durable identity records keyed by username.

Each identity lives under its own Redis key, so uniqueness is enforced by a
single atomic ``SET NX``.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ...exceptions import ConflictError, DependencyError

logger = logging.getLogger(__name__)

USERNAME_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,63}$"


class IdentityRecord(BaseModel):
    """A stored identity. Created on signup, never mutated."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str = Field(..., pattern=USERNAME_PATTERN)
    password_hash: str = Field(..., min_length=1)


class CredentialStore:
    def __init__(self, redis_client, key_prefix: str = "identity"):
        """
        Initialize credential store.

        Args:
            redis_client: Async Redis client for the authoritative store
            key_prefix: Namespace for identity keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, username: str) -> str:
        return f"{self.key_prefix}:{username}"

    async def insert(self, record: IdentityRecord) -> None:
        """
        Insert a new identity.

        Raises:
            ConflictError: If the username is already taken
        """
        created = await self.redis.set(self._key(record.username), record.model_dump_json(), nx=True)
        if not created:
            raise ConflictError(f"Username '{record.username}' is already taken")

    async def find(self, username: str) -> Optional[IdentityRecord]:
        """
        Look up an identity by username.

        Returns:
            IdentityRecord or None if not found

        Raises:
            DependencyError: If the stored record is corrupt
        """
        data = await self.redis.get(self._key(username))
        if data is None:
            return None

        try:
            return IdentityRecord.model_validate_json(data)
        except PydanticValidationError as e:
            logger.error(f"Corrupt identity record for key {self._key(username)}: {e.error_count()} errors")
            raise DependencyError("Credential store returned an unreadable record") from e
