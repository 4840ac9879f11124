"""
Credential transports.

Bearer tokens travel in the Authorization header and the JSON body; session
references travel in an HttpOnly cookie.
"""

from typing import Optional

from fastapi import Request, Response

from .interfaces import IssuedCredential


class BearerTransport:
    """Authorization header in, JSON body out."""

    header_names = ("authorization", "Authorization")

    def extract(self, request: Request) -> Optional[str]:
        for header_name in self.header_names:
            value = request.headers.get(header_name)
            if value:
                # Strip "Bearer " prefix if present
                if value.startswith("Bearer "):
                    value = value[7:]
                return value.strip() or None
        return None

    def deliver(self, response: Response, credential: IssuedCredential) -> dict:
        return {
            "token": credential.token,
            "expires": credential.expires_at.isoformat(),
        }

    def clear(self, response: Response) -> None:
        # Nothing is held on the client side that the server can clear
        return None


class CookieTransport:
    """Opaque session id in a cookie."""

    def __init__(self, cookie_name: str, secure: bool = False):
        self.cookie_name = cookie_name
        self.secure = secure

    def extract(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name) or None

    def deliver(self, response: Response, credential: IssuedCredential) -> dict:
        response.set_cookie(
            self.cookie_name,
            credential.token,
            httponly=True,
            secure=self.secure,
            samesite="lax",
            expires=credential.expires_at,
        )
        return {
            "message": "Session issued",
            "username": credential.username,
            "expires": credential.expires_at.isoformat(),
        }

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            self.cookie_name,
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
