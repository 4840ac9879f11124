"""
Session Module - Black Box Interface

Purpose: Server-held login credentials referenced by an opaque cookie
Interface: SessionStrategy.issue(), authenticate(), refresh(), revoke()
Hidden: Session storage, TTL management, token rotation

Replaceable with any session backend (database, in-memory, distributed cache).
"""

from .session import SessionStrategy

__all__ = ["SessionStrategy"]
