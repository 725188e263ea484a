"""Session persistence and login handling."""

from .manager import AuthManager
from .session import SessionStore


__all__ = ["AuthManager", "SessionStore"]
