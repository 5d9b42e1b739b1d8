"""Command-line maintenance tasks.

Usage:
  python -m app.cli create-admin --name "Site Admin" --email admin@corp.io --password '...'

There is no HTTP route that grants the admin role to a new account, so the
first administrator is created here.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from pydantic import ValidationError as SchemaValidationError

from app.config import settings
from app.core.exceptions import DuplicateEmailError
from app.core.logging import configure_logging
from app.core.security.passwords import hash_password
from app.db.session import Database
from app.models.user import UserRole
from app.schemas.user import RegisterRequest
from app.services.user_store import UserStore


async def create_admin(database: Database, *, name: str, email: str, password: str) -> str:
    """Create an active admin account and return its id."""
    data = RegisterRequest(name=name, email=email, password=password)
    await database.connect()
    try:
        async with database.session() as session:
            store = UserStore(session)
            if await store.email_taken(data.email):
                raise DuplicateEmailError("User already exists with this email")
            user = await store.create(
                name=data.name,
                email=data.email,
                hashed_password=hash_password(data.password),
                role=UserRole.ADMIN,
            )
            return user.id
    finally:
        await database.disconnect()


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="python -m app.cli")
    sub = ap.add_subparsers(dest="command", required=True)

    admin = sub.add_parser("create-admin", help="create an administrator account")
    admin.add_argument("--name", required=True)
    admin.add_argument("--email", required=True)
    admin.add_argument("--password", required=True)

    args = ap.parse_args(argv)
    configure_logging(settings.log_level)

    if args.command == "create-admin":
        try:
            user_id = asyncio.run(
                create_admin(
                    Database(settings),
                    name=args.name,
                    email=args.email,
                    password=args.password,
                )
            )
        except SchemaValidationError as exc:
            for err in exc.errors():
                print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
            return 2
        except DuplicateEmailError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        print(f"Created admin user {user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
