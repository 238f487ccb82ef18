"""REST gateway for the authenticated user's profile."""

from __future__ import annotations

import httpx

from xecare.domain.entities import SessionUser
from xecare.infrastructure.http import ApiError, request_json


class UserApi:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def profile(self) -> SessionUser:
        payload = await request_json(self.client, "GET", "/apis/user/profile")
        if not isinstance(payload, dict):
            raise ApiError("Profile endpoint returned an empty payload")
        return SessionUser.from_payload(payload)


__all__ = ["UserApi"]
