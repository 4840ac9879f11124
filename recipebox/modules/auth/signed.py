"""
Self-contained signed credentials (HS256 JWT).

The server holds no state for these tokens: identity and expiry are carried
in the claims and re-verified against the shared secret on every request.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional

import jwt

from ...exceptions import AuthenticationError, DependencyError, RefreshTooEarlyError, ValidationError
from .interfaces import CredentialTransport, IssuedCredential, Principal
from .transport import BearerTransport

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def utc_now() -> datetime:
    return datetime.now(UTC)


class SignedTokenStrategy:
    """
    Credential strategy minting JWTs signed with a server-held secret.

    A missing secret never lets a token through: issuance fails with a
    DependencyError and every verification fails with AuthenticationError.
    """

    name = "signed"
    supports_revocation = False

    def __init__(
        self,
        secret: Optional[str],
        credential_ttl: int = 600,
        refresh_ttl: int = 300,
        refresh_threshold: int = 30,
        transport: Optional[CredentialTransport] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize signed token strategy.

        Args:
            secret: Symmetric signing secret (None or empty disables the strategy)
            credential_ttl: Validity in seconds of tokens issued at signup/signin
            refresh_ttl: Validity in seconds of tokens issued by refresh
            refresh_threshold: Refresh is only allowed with at most this many seconds left
            transport: Credential transport (defaults to Authorization: Bearer)
            clock: Returns the current UTC time
        """
        self._secret = secret or None
        self.credential_ttl = credential_ttl
        self.refresh_ttl = refresh_ttl
        self.refresh_threshold = refresh_threshold
        self.transport = transport or BearerTransport()
        self.clock = clock

    def _mint(self, username: str, ttl: int) -> IssuedCredential:
        if not self._secret:
            logger.error("JWT_SECRET is not configured - refusing to sign tokens")
            raise DependencyError("Token signing is not configured")

        now = int(self.clock().timestamp())
        expires = now + ttl
        claims = {"username": username, "nbf": now, "exp": expires}
        token = jwt.encode(claims, self._secret, algorithm=ALGORITHM)

        return IssuedCredential(
            username=username,
            token=token,
            expires_at=datetime.fromtimestamp(expires, UTC),
        )

    def _verify(self, presented: Optional[str]) -> Principal:
        if not presented:
            raise AuthenticationError("Missing token")

        if not self._secret:
            logger.debug("JWT_SECRET is not configured - rejecting token")
            raise AuthenticationError("Invalid token")

        try:
            claims = jwt.decode(
                presented,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_signature": True,
                    # Time windows are checked below against the injected clock
                    "verify_exp": False,
                    "verify_nbf": False,
                    "require": ["exp", "username"],
                },
            )
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid JWT token: {e}")
            raise AuthenticationError("Invalid token") from e

        username = claims.get("username")
        exp = claims.get("exp")
        if not isinstance(username, str) or not username or not isinstance(exp, int):
            raise AuthenticationError("Invalid token")

        now = self.clock().timestamp()
        nbf = claims.get("nbf")
        if isinstance(nbf, int) and now < nbf:
            raise AuthenticationError("Token is not valid yet")
        if now > exp:
            raise AuthenticationError("Token has expired")

        return Principal(username=username, expires_at=datetime.fromtimestamp(exp, UTC))

    async def issue(self, username: str) -> IssuedCredential:
        return self._mint(username, self.credential_ttl)

    async def authenticate(self, presented: Optional[str]) -> Principal:
        return self._verify(presented)

    async def refresh(self, presented: Optional[str]) -> IssuedCredential:
        """
        Renew a token that is close to expiry.

        Raises:
            AuthenticationError: Token missing, forged or already expired
            RefreshTooEarlyError: More than refresh_threshold seconds remain
        """
        principal = self._verify(presented)

        remaining = principal.expires_at - self.clock()
        if remaining > timedelta(seconds=self.refresh_threshold):
            raise RefreshTooEarlyError("Token is not expired yet")

        return self._mint(principal.username, self.refresh_ttl)

    async def revoke(self, presented: Optional[str]) -> None:
        """Signed tokens carry no server-side state, so there is nothing to end."""
        raise ValidationError("Sign-out is only available with session credentials")
