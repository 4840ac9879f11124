"""
Password hasher for stored identities.

Passwords are reduced to a base64 SHA-256 digest before bcrypt sees them,
which keeps every input under bcrypt's 72-byte limit.
"""

import asyncio
import base64
import hashlib
import logging

import bcrypt

from ...exceptions import PasswordHashingError

logger = logging.getLogger(__name__)


def _prehash(password: str) -> bytes:
    """Fixed-length bcrypt input for a password of any length."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


class PasswordHasher:
    """
    Salted, work-factor bound one-way password hashing.

    Hashing and verification are CPU-bound, so both run in a worker thread
    and never block the event loop.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # Verified against when the username is unknown so both failure paths cost the same
        self._dummy_digest = bcrypt.hashpw(_prehash("recipebox"), bcrypt.gensalt(rounds)).decode("utf-8")

    def _hash_sync(self, plaintext: str) -> str:
        return bcrypt.hashpw(_prehash(plaintext), bcrypt.gensalt(self.rounds)).decode("utf-8")

    @staticmethod
    def _verify_sync(digest: str, plaintext: str) -> bool:
        try:
            return bool(bcrypt.checkpw(_prehash(plaintext), digest.encode("utf-8")))
        except (ValueError, TypeError):
            return False

    async def hash(self, plaintext: str) -> str:
        """
        Return the bcrypt digest of plaintext.

        Raises:
            PasswordHashingError: If the hash could not be computed
        """
        try:
            return await asyncio.to_thread(self._hash_sync, plaintext)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed: {type(e).__name__}")
            raise PasswordHashingError("Could not process password") from e

    async def verify(self, digest: str, plaintext: str) -> bool:
        """Return True if plaintext matches digest. Malformed digests never match."""
        return await asyncio.to_thread(self._verify_sync, digest, plaintext)

    async def burn(self, plaintext: str) -> None:
        """Spend one verification worth of work without a real digest."""
        await asyncio.to_thread(self._verify_sync, self._dummy_digest, plaintext)
