"""Typed gateways over the XeCare REST endpoints."""

from .garage_api import GarageApi, build_search_params
from .notification_api import NotificationApi
from .user_api import UserApi

__all__ = ["GarageApi", "NotificationApi", "UserApi", "build_search_params"]
