"""
Authentication Middleware Module - Black Box Interface

Purpose: Gate protected routes behind a valid credential
Interface: AuthGate, usable as a FastAPI "http" middleware
Hidden: Route matching, credential extraction, error formatting

The gate never calls the protected handler after rejecting a request: every
failure path returns its own response.
"""

import logging
from typing import Any, Callable, Dict, Iterable, Optional

import redis.asyncio as redis
from fastapi import Request
from fastapi.responses import JSONResponse

from ...exceptions import AuthenticationError

logger = logging.getLogger(__name__)

MUTATING_METHODS = ["POST", "PUT", "PATCH", "DELETE"]


class AuthGate:
    """
    Credential gate for FastAPI applications.

    Protection is declared as ``{path_prefix: [methods]}``; "*" matches any
    method. The active credential strategy is looked up per request through
    ``strategy_resolver`` so the gate can be installed before startup.
    """

    def __init__(
        self,
        strategy_resolver: Callable[[Request], Any],
        protected_paths: Optional[Dict[str, Iterable[str]]] = None,
        log_attempts: bool = True
    ):
        """
        Initialize authentication gate.

        Args:
            strategy_resolver: Returns the active CredentialStrategy for a request
            protected_paths: Dict of {path prefix: [methods]} requiring a credential
            log_attempts: Whether to log authentication attempts
        """
        self.strategy_resolver = strategy_resolver
        self.protected_paths = {
            prefix.rstrip("/") or "/": {method.upper() for method in methods}
            for prefix, methods in (protected_paths or {}).items()
        }
        self.log_attempts = log_attempts

    def requires_auth(self, request: Request) -> bool:
        """Check if this request targets a protected route."""
        path = request.url.path.rstrip("/") or "/"
        method = request.method.upper()

        for prefix, methods in self.protected_paths.items():
            if path == prefix or path.startswith(prefix + "/") or prefix == "/":
                if "*" in methods or method in methods:
                    return True

        return False

    @staticmethod
    def format_error(message: str) -> Dict[str, Any]:
        return {"error": message}

    async def __call__(self, request: Request, call_next):
        """Process the request through the gate."""
        if not self.requires_auth(request):
            return await call_next(request)

        strategy = self.strategy_resolver(request)
        if strategy is None:
            return JSONResponse(status_code=503, content=self.format_error("Service not initialized"))

        presented = strategy.transport.extract(request)

        try:
            principal = await strategy.authenticate(presented)
        except AuthenticationError as e:
            if self.log_attempts:
                logger.warning(f"Rejected {request.method} {request.url.path}: {e.message}")
            return JSONResponse(status_code=401, content=self.format_error(e.message))
        except redis.RedisError as e:
            logger.error(f"Credential backend unavailable during authentication: {e}")
            return JSONResponse(status_code=503, content=self.format_error("Storage backend unavailable"))

        if self.log_attempts:
            logger.debug(f"Request authenticated for {principal.username}")

        # Store identity for downstream use
        request.state.principal = principal

        return await call_next(request)


__all__ = ["AuthGate", "MUTATING_METHODS"]
