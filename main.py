#!/usr/bin/env python3
"""
TeamGate -- admin command line.

Signup never grants the admin role, so the first admin (and any later one)
is created here, directly against the configured database.

Usage:
  python main.py create-admin alice
  python main.py create-admin alice --password 's3cret'
  python main.py list-users
  python main.py serve --host 0.0.0.0 --port 8080

Environment variables:
  DATABASE_URL  SQLAlchemy URL of the database (default: sqlite file in the repo root)
  SECRET_KEY    Token signing key, at least 32 characters (or set DEBUG=true)
"""

import argparse
import getpass
import logging
import sys

from auth.models import User
from auth.store import UserStore
from auth.tokens import hash_password
from core.config import get_settings

logger = logging.getLogger("teamgate.cli")


def _open_store() -> UserStore:
    return UserStore(db_url=get_settings().database_url)


def cmd_create_admin(args: argparse.Namespace) -> int:
    password = args.password
    if password is None:
        password = getpass.getpass("Password: ")
        if password != getpass.getpass("Repeat password: "):
            print("  [!] Passwords do not match.")
            return 1
    if not password:
        print("  [!] Password must not be empty.")
        return 1

    store = _open_store()
    try:
        if store.get_by_username(args.username) is not None:
            print(f"  [!] User '{args.username}' already exists.")
            return 1
        uid = store.create_user(User(username=args.username, hashed_password=hash_password(password), role="admin"))
    finally:
        store.close()

    logger.info("Admin %r created (id=%d)", args.username, uid)
    print(f"  Created admin '{args.username}' (id={uid})")
    return 0


def cmd_list_users(args: argparse.Namespace) -> int:
    store = _open_store()
    try:
        users = store.list_users()
    finally:
        store.close()

    if not users:
        print("  No users.")
        return 0
    print(f"  {'ID':>5}  {'USERNAME':<24} {'ROLE':<8} TEAM")
    for u in users:
        team = str(u.team_id) if u.team_id else "-"
        print(f"  {u.id:>5}  {u.username:<24} {u.role or '-':<8} {team}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamgate",
        description="TeamGate admin tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_admin = sub.add_parser("create-admin", help="Create a user with the admin role")
    p_admin.add_argument("username")
    p_admin.add_argument("--password", help="Password (prompted for when omitted)")
    p_admin.set_defaults(func=cmd_create_admin)

    p_list = sub.add_parser("list-users", help="List all users with role and team")
    p_list.set_defaults(func=cmd_list_users)

    p_serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8080)
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes (development)")
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s %(message)s")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
