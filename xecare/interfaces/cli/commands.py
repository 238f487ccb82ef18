"""Command line access to the XeCare client for manual checks and debugging."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

import anyio

from xecare.application.use_cases.addresses import AddressLookup
from xecare.application.use_cases.garages import find_nearby_garages, format_distance
from xecare.application.use_cases.notifications import NotificationSync
from xecare.application.use_cases.session import AuthSession, SessionExpiredError
from xecare.config import Settings, get_settings
from xecare.domain.entities import Notification, UserLocation
from xecare.infrastructure.api import GarageApi, NotificationApi, UserApi
from xecare.infrastructure.events import NotificationEventBus
from xecare.infrastructure.geocoding import (
    GeocodingError,
    NominatimGeocoder,
    create_geocoding_client,
)
from xecare.infrastructure.http import ApiError, create_http_client
from xecare.infrastructure.storage import TOKEN_KEY, SessionStorage
from xecare.interfaces.presenters import NotificationBell

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser with one subcommand per operation."""

    parser = argparse.ArgumentParser(
        prog="xecare",
        description="Talk to the XeCare backend from the command line.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser(
        "login", help="Store a bearer token and load the profile"
    )
    login.add_argument("token", help="Bearer token issued by the backend")

    subparsers.add_parser("logout", help="Forget the stored token and user")

    nearby = subparsers.add_parser("nearby", help="List garages around a position")
    nearby.add_argument("--lat", type=float, required=True, help="Latitude of the user")
    nearby.add_argument("--lon", type=float, required=True, help="Longitude of the user")
    nearby.add_argument(
        "--radius",
        type=float,
        default=None,
        help="Search radius sent to the backend in km (default: from settings)",
    )
    nearby.add_argument(
        "--max-distance",
        type=float,
        default=None,
        help="Only count garages within this distance in km as nearby",
    )
    nearby.add_argument(
        "--no-sort",
        action="store_true",
        help="Keep the backend order instead of sorting by distance",
    )

    notifications = subparsers.add_parser(
        "notifications", help="List the notifications of the logged-in identity"
    )
    notifications.add_argument(
        "--unread", action="store_true", help="Only show unread notifications"
    )

    watch = subparsers.add_parser(
        "watch", help="Follow the unread count and print bell updates"
    )
    watch.add_argument(
        "--seconds",
        type=float,
        default=60.0,
        help="How long to keep watching (default: 60)",
    )

    geocode = subparsers.add_parser("geocode", help="Resolve an address to coordinates")
    geocode.add_argument("address", help="Free-form address")

    check = subparsers.add_parser(
        "check-address", help="Check whether an address is already used by a garage"
    )
    check.add_argument("address", help="Free-form address")
    check.add_argument(
        "--garage-id",
        type=int,
        default=None,
        help="Garage being edited; its own address is not reported as taken",
    )
    return parser


def _print_notifications(notifications: Sequence[Notification]) -> None:
    if not notifications:
        print("No notifications.")
        return
    for notification in notifications:
        marker = " " if notification.is_read else "*"
        created = notification.created_at.isoformat() if notification.created_at else "-"
        print(f"{marker} [{notification.id}] {created} {notification.title}")
        if notification.message:
            print(f"    {notification.message}")


async def _login(session: AuthSession, token: str) -> int:
    session.storage.set_item(TOKEN_KEY, token)
    try:
        user = await session.refresh_user()
    except SessionExpiredError as exc:
        print(exc)
        return 1
    if user is None:
        print("Token stored, but the profile could not be loaded.")
        return 1
    session.login(token, user)
    print(f"Logged in as {user.name} <{user.email}> ({user.role})")
    return 0


async def _nearby(garage_api: GarageApi, args: argparse.Namespace) -> int:
    ranking = await find_nearby_garages(
        garage_api,
        UserLocation(latitude=args.lat, longitude=args.lon),
        radius_km=args.radius,
        max_distance_km=args.max_distance,
        sort_by_distance=not args.no_sort,
    )
    if not ranking.sorted_garages:
        print("No garages found.")
        return 0
    for item in ranking.sorted_garages:
        distance = (
            format_distance(item.distance_from_user)
            if item.distance_from_user is not None
            else "?"
        )
        print(f"{distance:>8}  [{item.id}] {item.name} - {item.garage.address or '-'}")
    print(
        f"{len(ranking.nearby_garages)} nearby, "
        f"average distance {format_distance(ranking.average_distance)}"
    )
    return 0


async def _watch(
    notification_api: NotificationApi,
    identity_id: int | None,
    seconds: float,
) -> int:
    bus = NotificationEventBus()
    sync = NotificationSync(notification_api, event_bus=bus, identity_id=identity_id)
    bell = NotificationBell(sync, bus, navigate=lambda path: print(f"-> {path}"))
    last_view = None

    def _show(_state: object) -> None:
        nonlocal last_view
        view = bell.render()
        if view != last_view:
            last_view = view
            print(f"badge={view.badge or '-'} ringing={view.animating}")

    bell.attach()
    unsubscribe = sync.subscribe(_show)
    try:
        async with sync:
            await anyio.sleep(seconds)
    finally:
        unsubscribe()
        bell.detach()
    return 0


async def _geocode(settings: Settings, address: str) -> int:
    async with create_geocoding_client(settings) as client:
        geocoder = NominatimGeocoder(client, settings)
        lookup = AddressLookup(geocoder)
        await lookup.geocode_now(address)
        if lookup.result is None:
            print(lookup.error or "Address is too short to geocode.")
            return 1
        result = lookup.result
        print(f"{result.latitude:.6f}, {result.longitude:.6f}  {result.display_name}")
    return 0


async def _check_address(
    garage_api: GarageApi, address: str, garage_id: int | None
) -> int:
    if garage_id is None:
        validation = await garage_api.check_address(address)
    else:
        validation = await garage_api.check_address_for_edit(address, garage_id)
    status = "duplicate" if validation.is_duplicate else "available"
    print(f"{status}: {validation.message or validation.address}")
    return 2 if validation.is_duplicate else 0


async def run(args: argparse.Namespace, settings: Settings | None = None) -> int:
    """Execute the parsed command and return the process exit code."""

    settings = settings or get_settings()
    storage = SessionStorage(settings.storage_dir)

    if args.command == "geocode":
        return await _geocode(settings, args.address)

    session: AuthSession | None = None
    async with create_http_client(
        settings, token_provider=lambda: session.token if session else None
    ) as client:
        session = AuthSession(storage, UserApi(client))
        try:
            if args.command == "login":
                return await _login(session, args.token)
            if args.command == "logout":
                session.logout()
                print("Logged out.")
                return 0
            if args.command == "nearby":
                return await _nearby(GarageApi(client), args)
            if args.command == "check-address":
                return await _check_address(GarageApi(client), args.address, args.garage_id)

            notification_api = NotificationApi(client)
            if args.command == "notifications":
                notifications = await notification_api.list_mine()
                if args.unread:
                    notifications = [n for n in notifications if not n.is_read]
                _print_notifications(notifications)
                return 0
            if args.command == "watch":
                user = session.user
                return await _watch(
                    notification_api, user.id if user else None, args.seconds
                )
        except ApiError as exc:
            logger.error("Backend request failed: %s", exc)
            print(f"Error: {exc}")
            return 1
    raise ValueError(f"Unknown command {args.command!r}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point of the ``xecare`` console script."""

    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)
    try:
        exit_code = anyio.run(run, args, settings)
    except KeyboardInterrupt:
        exit_code = 130
    raise SystemExit(exit_code)


__all__ = ["build_parser", "main", "run"]
