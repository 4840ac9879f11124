"""
Authentication Service Facade following Black Box Design principles.

This module provides:
- Signup, signin, refresh and sign-out over whichever credential strategy is active
- A single undifferentiated failure for unknown users and wrong passwords
"""

import logging
from typing import Optional

from ...exceptions import AuthenticationError
from .credentials import CredentialStore, IdentityRecord
from .hasher import PasswordHasher
from .interfaces import CredentialStrategy, IssuedCredential, Principal

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class AuthenticationService:
    """
    Facade over credential store, password hasher and credential strategy.

    The API layer only talks to this class; which credential strategy is
    behind it is decided once, at startup.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        hasher: PasswordHasher,
        strategy: CredentialStrategy,
    ):
        self.credential_store = credential_store
        self.hasher = hasher
        self.strategy = strategy

    async def signup(self, username: str, password: str) -> IssuedCredential:
        """
        Enroll a new identity and issue its first credential.

        The password is hashed before anything is written, so a hashing
        failure leaves the credential store untouched.

        Raises:
            PasswordHashingError: If hashing failed
            ConflictError: If the username is taken
        """
        password_hash = await self.hasher.hash(password)
        await self.credential_store.insert(IdentityRecord(username=username, password_hash=password_hash))
        logger.info(f"Identity enrolled: {username}")

        return await self.strategy.issue(username)

    async def signin(self, username: str, password: str) -> IssuedCredential:
        """
        Verify a username/password pair and issue a fresh credential.

        Raises:
            AuthenticationError: Unknown user or wrong password (same message for both)
        """
        record = await self.credential_store.find(username)

        if record is None:
            await self.hasher.burn(password)
            logger.warning("Sign-in failed: invalid credentials")
            raise AuthenticationError(INVALID_CREDENTIALS)

        if not await self.hasher.verify(record.password_hash, password):
            logger.warning("Sign-in failed: invalid credentials")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info(f"Signed in: {username}")
        return await self.strategy.issue(username)

    async def refresh(self, presented: Optional[str]) -> IssuedCredential:
        """Issue a successor for a presented credential."""
        credential = await self.strategy.refresh(presented)
        logger.info(f"Credential refreshed for {credential.username}")
        return credential

    async def signout(self, presented: Optional[str]) -> None:
        """Revoke a presented credential."""
        await self.strategy.revoke(presented)

    async def authenticate(self, presented: Optional[str]) -> Principal:
        """Validate a presented credential."""
        return await self.strategy.authenticate(presented)
