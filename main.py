#!/usr/bin/env python3
"""
Store Manager -- command-line client.

Hybrid client:
  - Login is checked locally through AuthenticationService against the
    configured database (DATABASE_URL).
  - Store and user operations go through the REST API (API_BASE_URL) with
    the same Basic-Auth credentials.
  - create-user writes to the local database directly. It is how the first
    admin is created; once any user exists it requires an ADMIN login.

Usage:
  python main.py --email admin@x.com login
  python main.py --email admin@x.com stores list
  python main.py --email admin@x.com stores create S001 "Main St Store" "1 Main St"
  python main.py --email admin@x.com stores update S001 --description "Flagship"
  python main.py --email admin@x.com users create ann@x.com "Ann" --role manager
  python main.py create-user admin@x.com "Admin" --role admin

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the local database (default sqlite:///storemgr.db)
  API_BASE_URL   REST API base URL (default http://localhost:8000/api/v1)
"""

import argparse
import getpass
import json
import sys
from typing import Any, Optional

from auth.roles import Role, has_role
from auth.service import AuthenticationService, encode_basic
from client.api import ApiResult, StoreApiClient
from core.config import Settings, get_settings
from core.errors import DuplicateUserError, ValidationError
from core.models import User
from repository.users import UserRepository
from storage.sql import SqlDataManager


def _open_data_manager(database_url: str) -> SqlDataManager:
    """Open the local database. main() closes it when the command finishes."""
    return SqlDataManager(database_url)


def _print_result(result: ApiResult) -> int:
    """Print an API result. Returns the process exit code for it."""
    if result.ok:
        if result.body is not None:
            print(json.dumps(result.body, indent=2))
        else:
            print("  [OK]")
        return 0
    error: Any = result.body
    if isinstance(error, dict) and isinstance(error.get("error"), dict):
        message = error["error"].get("message", "")
        detail = error["error"].get("detail")
        print(f"  [!] {result.status}: {message}" + (f" ({detail})" if detail else ""))
    else:
        print(f"  [!] {result.status}: {error}")
    return 1


def _prompt_secret(prompt: str, value: Optional[str]) -> str:
    return value if value else getpass.getpass(prompt)


def _authenticate(auth_service: AuthenticationService, email: Optional[str], password: Optional[str]) -> Optional[User]:
    """Check credentials locally. Prints the outcome and returns the user or None."""
    if not email:
        print("  [X] --email is required for this command.")
        return None
    header = encode_basic(email, _prompt_secret("Password: ", password))
    user = auth_service.authenticate_basic(header)
    if user is None:
        print("  [X] Authentication failed: Invalid credentials")
        return None
    print(f"  [OK] Welcome, {user.name} ({user.role.value})")
    return user


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_create_user(args: argparse.Namespace, auth_service: AuthenticationService) -> int:
    if auth_service.get_all_users():
        actor = _authenticate(auth_service, args.email, args.password)
        if actor is None:
            return 1
        if not has_role(actor, Role.ADMIN):
            print("  [X] Only an ADMIN may create users.")
            return 1
    new_password = _prompt_secret(f"Password for {args.user_email}: ", args.user_password)
    try:
        user = auth_service.register_user(args.user_email, new_password, args.name, args.role)
    except (ValidationError, DuplicateUserError) as e:
        print(f"  [!] {e}")
        return 1
    print(f"  [OK] Created {user.email} ({user.role.value})")
    return 0


def _cmd_stores(args: argparse.Namespace, client: StoreApiClient) -> int:
    if args.action == "list":
        return _print_result(client.list_stores())
    if args.action == "show":
        return _print_result(client.get_store(args.store_id))
    if args.action == "create":
        return _print_result(client.create_store(args.store_id, args.name, args.address, args.description))
    if args.action == "update":
        return _print_result(client.update_store(args.store_id, args.description, args.address))
    return _print_result(client.delete_store(args.store_id))


def _cmd_users(args: argparse.Namespace, client: StoreApiClient) -> int:
    if args.action == "list":
        return _print_result(client.list_users())
    if args.action == "show":
        return _print_result(client.get_user(args.user_email))
    if args.action == "create":
        new_password = _prompt_secret(f"Password for {args.user_email}: ", args.user_password)
        return _print_result(client.create_user(args.user_email, new_password, args.name, args.role))
    if args.action == "update":
        return _print_result(client.update_user(args.user_email, args.user_password, args.name))
    return _print_result(client.delete_user(args.user_email))


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="store-manager",
        description="Store Manager command-line client.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--email", help="Login email")
    parser.add_argument("--password", help="Login password (prompted when omitted)")
    parser.add_argument("--api-url", metavar="URL", help="REST API base URL (default: API_BASE_URL)")
    parser.add_argument("--database-url", metavar="URL", help="Local database URL (default: DATABASE_URL)")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("login", help="Verify credentials and show the current role")

    create_user = commands.add_parser("create-user", help="Create a user in the local database")
    create_user.add_argument("user_email", metavar="EMAIL")
    create_user.add_argument("name", metavar="NAME")
    create_user.add_argument("--role", default="USER", help="ADMIN, MANAGER or USER (default: USER)")
    create_user.add_argument("--user-password", help="New user's password (prompted when omitted)")

    stores = commands.add_parser("stores", help="Manage stores via the REST API")
    store_actions = stores.add_subparsers(dest="action", required=True)
    store_actions.add_parser("list", help="List all stores")
    show = store_actions.add_parser("show", help="Show one store")
    show.add_argument("store_id", metavar="STORE_ID")
    create = store_actions.add_parser("create", help="Provision a store")
    create.add_argument("store_id", metavar="STORE_ID")
    create.add_argument("name", metavar="NAME")
    create.add_argument("address", metavar="ADDRESS")
    create.add_argument("--description")
    update = store_actions.add_parser("update", help="Update description and/or address")
    update.add_argument("store_id", metavar="STORE_ID")
    update.add_argument("--description")
    update.add_argument("--address")
    delete = store_actions.add_parser("delete", help="Delete a store")
    delete.add_argument("store_id", metavar="STORE_ID")

    users = commands.add_parser("users", help="Manage users via the REST API")
    user_actions = users.add_subparsers(dest="action", required=True)
    user_actions.add_parser("list", help="List all users")
    show = user_actions.add_parser("show", help="Show one user")
    show.add_argument("user_email", metavar="EMAIL")
    create = user_actions.add_parser("create", help="Register a user")
    create.add_argument("user_email", metavar="EMAIL")
    create.add_argument("name", metavar="NAME")
    create.add_argument("--role", help="ADMIN, MANAGER or USER (default: USER)")
    create.add_argument("--user-password", help="New user's password (prompted when omitted)")
    update = user_actions.add_parser("update", help="Change a user's password and/or name")
    update.add_argument("user_email", metavar="EMAIL")
    update.add_argument("--name")
    update.add_argument("--user-password", help="New password")
    delete = user_actions.add_parser("delete", help="Delete a user")
    delete.add_argument("user_email", metavar="EMAIL")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    data_manager = _open_data_manager(args.database_url or settings.database_url)
    try:
        return _dispatch(args, settings, AuthenticationService(UserRepository(data_manager)))
    finally:
        data_manager.close()


def _dispatch(args: argparse.Namespace, settings: Settings, auth_service: AuthenticationService) -> int:
    if args.command == "create-user":
        return _cmd_create_user(args, auth_service)

    # Resolve the password once so the local check and the API calls agree.
    args.password = _prompt_secret("Password: ", args.password) if args.email else args.password
    if _authenticate(auth_service, args.email, args.password) is None:
        return 1
    if args.command == "login":
        return 0

    client = StoreApiClient(args.api_url or settings.api_base_url, encode_basic(args.email, args.password))
    if args.command == "stores":
        return _cmd_stores(args, client)
    return _cmd_users(args, client)


if __name__ == "__main__":
    sys.exit(main())
