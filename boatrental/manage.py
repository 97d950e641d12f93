"""Administrative commands for Boat Rental Admin.

Usage:
    boatrental-admin create-user <username> [--password <password>]
    boatrental-admin create-tables

When --password is omitted the password is prompted for twice.
"""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from boatrental.core import async_session_maker, create_tables, settings, setup_logging
from boatrental.models.user import User
from boatrental.services.auth import AuthError, AuthService

MIN_PASSWORD_LENGTH = 8


async def create_user(
    username: str,
    password: str,
    session_factory: async_sessionmaker[AsyncSession] = async_session_maker,
) -> User:
    """Hash the password and insert the credential record."""
    async with session_factory() as db:
        return await AuthService(db).create_user(username, password)


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        print("ERROR: Passwords do not match.")
        sys.exit(1)
    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boatrental-admin", description="Manage Boat Rental Admin"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    create_user_cmd = commands.add_parser("create-user", help="Create a login")
    create_user_cmd.add_argument("username")
    create_user_cmd.add_argument("--password", help="Password (prompted for if omitted)")

    commands.add_parser("create-tables", help="Create any missing database tables")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=settings.log_level, format_type="dev")

    if args.command == "create-tables":
        asyncio.run(create_tables())
        print("Database tables created.")
        return 0

    username = args.username.strip()
    if not username:
        print("ERROR: Username must not be empty.")
        return 1
    password = args.password if args.password is not None else _prompt_password()
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"ERROR: Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return 1

    try:
        user = asyncio.run(create_user(username, password))
    except AuthError as e:
        print(f"ERROR: {e}")
        return 1
    print(f"Created user '{user.username}' (id={user.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
