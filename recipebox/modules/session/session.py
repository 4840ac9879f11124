import json
import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional

from ...exceptions import AuthenticationError, DependencyError
from ..auth.interfaces import CredentialTransport, IssuedCredential, Principal
from ..auth.transport import CookieTransport

logger = logging.getLogger(__name__)

ISSUE_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionStrategy:
    """
    Credential strategy keeping login state in Redis.

    The client only holds the session id. The record behind it binds a
    username to an opaque token and an absolute expiry; the Redis TTL on the
    key matches that expiry.
    """

    name = "session"
    supports_revocation = True

    def __init__(
        self,
        redis_client,
        credential_ttl: int = 600,
        refresh_ttl: int = 300,
        transport: Optional[CredentialTransport] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize session strategy.

        Args:
            redis_client: Async Redis client holding session records
            credential_ttl: Session lifetime in seconds after signup/signin
            refresh_ttl: Session lifetime in seconds after a refresh
            transport: Credential transport (defaults to a session cookie)
            clock: Returns the current UTC time
        """
        self.redis = redis_client
        self.credential_ttl = credential_ttl
        self.refresh_ttl = refresh_ttl
        self.transport = transport or CookieTransport("recipebox_session")
        self.clock = clock

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}"

    def _now(self) -> datetime:
        return self.clock().replace(microsecond=0)

    def _record(self, username: str, expires_at: datetime, created_at: Optional[str] = None) -> dict:
        return {
            "username": username,
            "token": secrets.token_urlsafe(32),
            "created_at": created_at or self._now().isoformat(),
            "expires_at": expires_at.isoformat(),
        }

    async def _load(self, session_id: Optional[str]) -> dict:
        if not session_id:
            raise AuthenticationError("Not logged in")

        data = await self.redis.get(self._key(session_id))
        if not data:
            raise AuthenticationError("Invalid session cookie")

        try:
            record = json.loads(data)
            expires_at = datetime.fromisoformat(record["expires_at"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable session {session_id[:8]}...")
            await self.redis.delete(self._key(session_id))
            raise AuthenticationError("Invalid session cookie") from e

        if not record.get("token") or not record.get("username"):
            raise AuthenticationError("Invalid session cookie")

        if self.clock() > expires_at:
            # Store TTL normally removes these first; clean up if it has not yet
            await self.redis.delete(self._key(session_id))
            raise AuthenticationError("Session has expired")

        record["expires_at"] = expires_at
        return record

    async def issue(self, username: str) -> IssuedCredential:
        """
        Create a new session for username.

        Logic:
        1. Generate an unguessable session id
        2. Bind a fresh opaque token and expiry to it
        3. Store with a TTL matching the expiry, never over an existing session

        Raises:
            DependencyError: If no unused session id could be allocated
        """
        record = self._record(username, self._now() + timedelta(seconds=self.credential_ttl))

        for _ in range(ISSUE_ATTEMPTS):
            session_id = secrets.token_urlsafe(32)
            created = await self.redis.set(
                self._key(session_id), json.dumps(record), ex=self.credential_ttl, nx=True
            )
            if created:
                break
            logger.warning(f"Session id {session_id[:8]}... already in use, generating another")
        else:
            raise DependencyError("Could not allocate a session")

        logger.info(f"Session {session_id[:8]}... created for {username}")

        return IssuedCredential(
            username=username,
            token=session_id,
            expires_at=datetime.fromisoformat(record["expires_at"]),
        )

    async def authenticate(self, presented: Optional[str]) -> Principal:
        record = await self._load(presented)
        return Principal(username=record["username"], expires_at=record["expires_at"])

    async def refresh(self, presented: Optional[str]) -> IssuedCredential:
        """
        Rotate the token bound to an existing, unexpired session.

        The new expiry is refresh_ttl from now, but never earlier than the
        expiry being replaced. The write only succeeds if the session still
        exists, so a session signed out concurrently is never brought back.
        """
        record = await self._load(presented)
        now = self._now()
        expires_at = max(record["expires_at"], now + timedelta(seconds=self.refresh_ttl))
        rotated = self._record(record["username"], expires_at, created_at=record.get("created_at"))

        ttl = int((expires_at - now).total_seconds())
        updated = await self.redis.set(self._key(presented), json.dumps(rotated), ex=ttl, xx=True)
        if not updated:
            raise AuthenticationError("Invalid session cookie")

        logger.info(f"Session {presented[:8]}... refreshed for {record['username']}")
        return IssuedCredential(
            username=record["username"],
            token=presented,
            expires_at=datetime.fromisoformat(rotated["expires_at"]),
        )

    async def revoke(self, presented: Optional[str]) -> None:
        """Delete all server-side state behind a session reference."""
        if not presented:
            return
        await self.redis.delete(self._key(presented))
        logger.info(f"Session {presented[:8]}... ended")
