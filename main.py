#!/usr/bin/env python3
"""
Postboard -- management commands.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py create-user alice alice@example.com
  python main.py purge-sessions
  python main.py revoke-sessions alice
  python main.py --database-url sqlite:///other.db purge-sessions

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the database (default: ./postboard.db).
  Every Settings field in core/config.py can be set the same way.
"""

import argparse
import os
import sys
from getpass import getpass
from typing import Optional

from auth.service import register_user
from auth.sessions import SessionManager
from auth.store import SessionStore, UserStore
from core.config import get_settings
from core.database import create_db_engine
from core.errors import FormError
from core.forms import SignUpForm, validate_form


def _create_user(users: UserStore, username: str, email: str) -> int:
    password = getpass("Password: ")
    if password != getpass("Repeat password: "):
        print("  [!] Passwords do not match.")
        return 1
    form, errors = validate_form(SignUpForm, {"username": username, "email": email, "password": password})
    if form is None:
        for field, messages in errors.items():
            for msg in messages:
                print(f"  [!] {field}: {msg}")
        return 1
    try:
        user = register_user(users, form.username, form.email, form.password)
    except FormError as exc:
        print(f"  [!] {exc.message}")
        return 1
    print(f"Created user {user.username} ({user.id}).")
    return 0


def _revoke_sessions(users: UserStore, manager: SessionManager, username: str) -> int:
    user = users.get_by_username(username)
    if user is None:
        print(f"  [!] No such user: {username}")
        return 1
    removed = manager.invalidate_user_sessions(user.id)
    print(f"Revoked {removed} session(s) for {username}.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="postboard",
        description="Postboard management commands.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--database-url",
        metavar="URL",
        default=settings.database_url,
        help="SQLAlchemy database URL (default: DATABASE_URL or ./postboard.db)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the web app with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")

    create = sub.add_parser("create-user", help="Create a password account (password is prompted)")
    create.add_argument("username")
    create.add_argument("email")

    sub.add_parser("purge-sessions", help="Delete expired sessions")

    revoke = sub.add_parser("revoke-sessions", help="Sign a user out everywhere")
    revoke.add_argument("username")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "serve":
        import uvicorn

        # The app reads its settings at import; hand the URL over through the
        # environment so asgi:app (and any reload worker) sees the same database.
        os.environ["DATABASE_URL"] = args.database_url
        get_settings.cache_clear()
        uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    engine = create_db_engine(args.database_url)
    try:
        users = UserStore(engine)
        manager = SessionManager.from_settings(SessionStore(engine), settings)

        if args.command == "create-user":
            return _create_user(users, args.username, args.email)

        if args.command == "purge-sessions":
            removed = manager.delete_expired_sessions()
            print(f"Purged {removed} expired session(s).")
            return 0

        return _revoke_sessions(users, manager, args.username)
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
