"""Authentication interfaces following Black Box Design principles."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class IssuedCredential:
    """
    A freshly minted credential.

    ``token`` is what the client presents on later requests: the signed token
    itself, or the opaque session reference for the session variant.
    """
    username: str
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class Principal:
    """The identity proven by a presented credential."""
    username: str
    expires_at: datetime


class CredentialTransport(Protocol):
    """How a credential travels between client and server."""

    def extract(self, request) -> Optional[str]:
        """Return the presented credential, or None."""
        ...

    def deliver(self, response, credential: IssuedCredential) -> dict:
        """Attach credential to response and return the JSON body to send."""
        ...

    def clear(self, response) -> None:
        """Tell the client to forget its credential."""
        ...


class CredentialStrategy(Protocol):
    """
    Protocol for credential strategies - exactly one is active per deployment.

    Every method raises AuthenticationError when the presented credential
    does not prove an identity.
    """

    name: str
    supports_revocation: bool
    transport: CredentialTransport

    async def issue(self, username: str) -> IssuedCredential:
        """Mint a fresh credential for username."""
        ...

    async def authenticate(self, presented: Optional[str]) -> Principal:
        """Validate a presented credential."""
        ...

    async def refresh(self, presented: Optional[str]) -> IssuedCredential:
        """Issue a successor credential without re-authentication."""
        ...

    async def revoke(self, presented: Optional[str]) -> None:
        """Make a presented credential permanently unusable."""
        ...
