"""User administration script for Bizdir.

API accounts only matter when the directory is backed by MongoDB, so every
command needs ``database.mongodb_url`` (or ``BIZDIR_MONGODB_URL``).

Commands:
    add       Add a new user
    list      List all users
    disable   Disable a user account
    enable    Enable a user account
    remove    Remove a user account
    passwd    Change a user's password
"""

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from getpass import getpass
from typing import Optional

from bizdir.config import settings
from bizdir.database import connect_database
from bizdir.models.user import User
from bizdir.services.auth import get_password_hash


class UserAdminError(Exception):
    """A user administration command cannot be carried out."""


async def run_with_database(command: Callable[[], Awaitable[None]]) -> None:
    """Connect to MongoDB, run the command, and disconnect."""
    config = settings.config.database
    if not config.configured:
        raise UserAdminError("No MongoDB URL configured (set BIZDIR_MONGODB_URL).")

    client, _ = await connect_database(config)
    try:
        await command()
    finally:
        client.close()


async def _get_user(username: str) -> User:
    user = await User.find_one(User.username == username)
    if user is None:
        raise UserAdminError(f"User '{username}' not found.")
    return user


async def add_user(
    username: str,
    password: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    is_admin: bool = False,
) -> None:
    """Add a new user."""
    if await User.find_one(User.username == username):
        raise UserAdminError(f"User '{username}' already exists.")

    if email and await User.find_one(User.email == email):
        raise UserAdminError(f"Email '{email}' already in use.")

    user = User(
        username=username,
        email=email,
        full_name=full_name,
        hashed_password=get_password_hash(password),
        is_admin=is_admin,
        is_active=True,
    )
    await user.insert()

    role = "admin" if is_admin else "user"
    print(f"User '{username}' created successfully as {role}.")


async def list_users() -> None:
    """List all users."""
    users = await User.find_all().sort(+User.username).to_list()
    if not users:
        print("No users found.")
        return

    print(f"{'Username':<20} {'Email':<30} {'Admin':<6} {'Active':<6} {'Last Login':<20}")
    print("-" * 90)
    for user in users:
        last_login = user.last_login.strftime("%Y-%m-%d %H:%M") if user.last_login else "Never"
        admin = "Yes" if user.is_admin else "No"
        active = "Yes" if user.is_active else "No"
        print(f"{user.username:<20} {user.email or '':<30} {admin:<6} {active:<6} {last_login:<20}")


async def set_user_active(username: str, active: bool) -> None:
    """Enable or disable a user account."""
    user = await _get_user(username)
    state = "active" if active else "disabled"
    if user.is_active == active:
        print(f"User '{username}' is already {state}.")
        return

    user.is_active = active
    user.updated_at = datetime.now(timezone.utc)
    await user.save()
    print(f"User '{username}' has been {'enabled' if active else 'disabled'}.")


async def remove_user(username: str, force: bool = False) -> None:
    """Remove a user account."""
    user = await _get_user(username)

    if not force:
        confirm = input(f"Are you sure you want to remove user '{username}'? [y/N]: ")
        if confirm.lower() != "y":
            print("Aborted.")
            return

    await user.delete()
    print(f"User '{username}' has been removed.")


async def change_password(username: str, password: str) -> None:
    """Change a user's password."""
    user = await _get_user(username)
    user.hashed_password = get_password_hash(password)
    user.updated_at = datetime.now(timezone.utc)
    await user.save()
    print(f"Password for user '{username}' has been updated.")


def get_password_interactive(confirm: bool = True) -> str:
    """Get password interactively from user."""
    password = getpass("Password: ")
    if not password:
        raise UserAdminError("Password cannot be empty.")

    if confirm and getpass("Confirm password: ") != password:
        raise UserAdminError("Passwords do not match.")

    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="User administration for Bizdir",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_parser = subparsers.add_parser("add", help="Add a new user")
    add_parser.add_argument("username", help="Username for the new user")
    add_parser.add_argument("--email", "-e", help="Email address")
    add_parser.add_argument("--name", "-n", dest="full_name", help="Full name")
    add_parser.add_argument("--admin", "-a", action="store_true", help="Make user an admin")
    add_parser.add_argument("--password", "-p", help="Password (will prompt if not provided)")

    subparsers.add_parser("list", help="List all users")

    disable_parser = subparsers.add_parser("disable", help="Disable a user account")
    disable_parser.add_argument("username", help="Username to disable")

    enable_parser = subparsers.add_parser("enable", help="Enable a user account")
    enable_parser.add_argument("username", help="Username to enable")

    remove_parser = subparsers.add_parser("remove", help="Remove a user account")
    remove_parser.add_argument("username", help="Username to remove")
    remove_parser.add_argument("--force", "-f", action="store_true", help="Skip confirmation")

    passwd_parser = subparsers.add_parser("passwd", help="Change a user's password")
    passwd_parser.add_argument("username", help="Username to change password for")
    passwd_parser.add_argument("--password", "-p", help="New password (will prompt if not provided)")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "add":
            password = args.password or get_password_interactive()
            command = lambda: add_user(  # noqa: E731
                args.username, password, args.email, args.full_name, args.admin
            )
        elif args.command == "list":
            command = list_users
        elif args.command == "disable":
            command = lambda: set_user_active(args.username, False)  # noqa: E731
        elif args.command == "enable":
            command = lambda: set_user_active(args.username, True)  # noqa: E731
        elif args.command == "remove":
            command = lambda: remove_user(args.username, args.force)  # noqa: E731
        else:
            password = args.password or get_password_interactive()
            command = lambda: change_password(args.username, password)  # noqa: E731

        asyncio.run(run_with_database(command))

    except UserAdminError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
