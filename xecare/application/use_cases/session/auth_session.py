"""Persisted login session: bearer token plus the profile of the signed-in user."""

from __future__ import annotations

import logging
from typing import Any, Callable

from xecare.domain.entities import SessionUser
from xecare.infrastructure.api import UserApi
from xecare.infrastructure.http import ApiError, AuthenticationError
from xecare.infrastructure.storage import TOKEN_KEY, USER_KEY, SessionStorage

logger = logging.getLogger(__name__)


class SessionExpiredError(Exception):
    """Raised when the backend rejects the stored token."""


class AuthSession:
    """Read and write the session kept in :class:`SessionStorage`."""

    def __init__(
        self,
        storage: SessionStorage,
        user_api: UserApi | None = None,
        *,
        on_logout: Callable[[], Any] | None = None,
    ) -> None:
        self.storage = storage
        self.user_api = user_api
        self.on_logout = on_logout

    @property
    def token(self) -> str | None:
        token = self.storage.get_item(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    @property
    def user(self) -> SessionUser | None:
        payload = self.storage.get_item(USER_KEY)
        if not isinstance(payload, dict):
            return None
        try:
            return SessionUser.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed stored user: %s", exc)
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def login(self, token: str, user: SessionUser) -> None:
        if not token:
            raise ValueError("A token is required to log in")
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.to_payload())
        logger.info("Logged in as user %s", user.id)

    def logout(self) -> None:
        self.storage.clear()
        logger.info("Session cleared")
        if self.on_logout is not None:
            self.on_logout()

    async def refresh_user(self) -> SessionUser | None:
        """Reload the profile of the signed-in user from the backend.

        Without a token the stored user is dropped and ``None`` is returned.
        A 401/403 logs the session out and raises :class:`SessionExpiredError`;
        any other failure keeps the stored user.
        """

        if self.token is None:
            self.storage.remove_item(USER_KEY)
            return None
        if self.user_api is None:
            raise ValueError("A UserApi is required to refresh the user")

        try:
            user = await self.user_api.profile()
        except AuthenticationError as exc:
            logger.info("Stored token rejected (%s); logging out", exc.status_code)
            self.logout()
            raise SessionExpiredError(
                "Your session has expired. Please log in again."
            ) from exc
        except ApiError as exc:
            logger.warning("Could not refresh user profile: %s", exc)
            return self.user

        self.storage.set_item(USER_KEY, user.to_payload())
        return user


__all__ = ["AuthSession", "SessionExpiredError"]
