"""
Authentication Module - Black Box Interface

Purpose: Enroll identities, verify passwords, issue and renew credentials
Interface: AuthenticationService.signup(), signin(), refresh(), signout(), authenticate()
Hidden: Hash algorithm, token format, credential storage

The credential strategy behind the service (signed tokens here, sessions in
the session module) is chosen per deployment and can be swapped without
affecting other modules.
"""

from .credentials import CredentialStore, IdentityRecord
from .hasher import PasswordHasher
from .interfaces import CredentialStrategy, CredentialTransport, IssuedCredential, Principal
from .service import AuthenticationService
from .signed import SignedTokenStrategy
from .transport import BearerTransport, CookieTransport

__all__ = [
    "AuthenticationService",
    "BearerTransport",
    "CookieTransport",
    "CredentialStore",
    "CredentialStrategy",
    "CredentialTransport",
    "IdentityRecord",
    "IssuedCredential",
    "PasswordHasher",
    "Principal",
    "SignedTokenStrategy",
]
