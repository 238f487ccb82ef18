"""Report notifications that are not addressed to the logged-in identity.

Useful when the bell shows a count the notifications page cannot explain: the
backend is expected to only return notifications whose recipient matches the
profile of the stored token.
"""

from __future__ import annotations

import argparse

import anyio

from xecare.config import get_settings
from xecare.infrastructure.api import NotificationApi, UserApi
from xecare.infrastructure.http import ApiError, AuthenticationError, create_http_client
from xecare.infrastructure.storage import TOKEN_KEY, SessionStorage


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the recipient check."""

    parser = argparse.ArgumentParser(
        description="List notifications whose recipient differs from the current profile.",
    )
    parser.add_argument(
        "--token",
        default=None,
        help="Bearer token to use instead of the one stored by 'xecare login'",
    )
    return parser.parse_args()


async def check(token: str) -> int:
    async with create_http_client(token_provider=lambda: token) as client:
        profile = await UserApi(client).profile()
        notifications = await NotificationApi(client).list_mine()
        unread_count = await NotificationApi(client).unread_count()

    mismatched = [n for n in notifications if not n.is_actionable_by(profile.id)]
    unread = sum(1 for n in notifications if not n.is_read)
    print(
        f"Profile {profile.id} ({profile.role}): {len(notifications)} notifications, "
        f"{unread} unread in list, {unread_count} unread reported by the count endpoint"
    )
    for notification in mismatched:
        print(
            f"  [{notification.id}] recipient {notification.recipient_type.value} "
            f"{notification.recipient_id}: {notification.title}"
        )
    if not mismatched:
        print("All notifications belong to the current profile.")
    return 1 if mismatched or unread != unread_count else 0


def main() -> None:
    """Run the check with the stored or provided token."""

    args = parse_args()
    token = args.token or SessionStorage(get_settings().storage_dir).get_item(TOKEN_KEY)
    if not token:
        raise SystemExit("No token stored. Run 'xecare login TOKEN' or pass --token.")

    try:
        exit_code = anyio.run(check, token)
    except AuthenticationError as exc:
        raise SystemExit(f"The token was rejected: {exc}") from exc
    except ApiError as exc:
        raise SystemExit(f"Could not reach the backend: {exc}") from exc
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
