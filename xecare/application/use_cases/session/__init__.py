"""Login session persistence."""

from .auth_session import AuthSession, SessionExpiredError

__all__ = ["AuthSession", "SessionExpiredError"]
