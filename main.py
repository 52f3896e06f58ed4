"""Command-line interface for the usergql access layer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from getpass import getpass
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

try:
    import httpx  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Execute `pip install -e .` to install dependencies."
    ) from exc

from usergql.client import HTTPGraphQLClient
from usergql.codegen import SchemaError, render_module
from usergql.config import ClientConfig, ConfigurationError, load_client_config, resolve_config_path
from usergql.facade import UserFacade
from usergql.models import User
from usergql.results import Result

logger = logging.getLogger("usergql.main")

_OPERATION_COMMANDS = {
    "users": "users",
    "user": "user",
    "create-user": "createUser",
    "update-user": "updateUser",
    "delete-user": "deleteUser",
}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GraphQL user access utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the client configuration file (default: USERGQL_CONFIG or config/client.yaml)",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help="GraphQL endpoint URL, overriding the configuration file",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    generate_parser = subparsers.add_parser(
        "generate", help="Generate a Python client module (types, documents, functions) from a schema"
    )
    generate_parser.add_argument("--schema", required=True, help="Path to the GraphQL schema file")
    generate_parser.add_argument(
        "--output",
        required=True,
        help="Path to the generated Python module, or '-' for standard output",
    )
    generate_parser.add_argument(
        "--header",
        default="",
        help="Code inserted at the top of the generated module (\\n starts a new line)",
    )
    generate_parser.add_argument(
        "--exclude-field",
        dest="exclude_fields",
        action="append",
        default=[],
        metavar="NAME",
        help="Leave a field out of every selection and type (repeatable)",
    )
    generate_parser.add_argument(
        "--raise-errors",
        action="store_true",
        help="Generated functions return the field value and raise on failure",
    )

    subparsers.add_parser("users", help="List all users")

    user_parser = subparsers.add_parser("user", help="Show a single user")
    user_parser.add_argument("id", help="User identifier")

    create_parser = subparsers.add_parser("create-user", help="Create a user")
    create_parser.add_argument("name", help="Display name for the user")
    create_parser.add_argument("email", help="Email address for the user")

    update_parser = subparsers.add_parser("update-user", help="Update a user")
    update_parser.add_argument("id", help="User identifier")
    update_parser.add_argument("--name", default=None, help="New display name")
    update_parser.add_argument("--email", default=None, help="New email address")
    update_parser.add_argument(
        "--change-password",
        action="store_true",
        help="Prompt for a new password",
    )

    delete_parser = subparsers.add_parser("delete-user", help="Delete a user")
    delete_parser.add_argument("id", help="User identifier")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    return parser.parse_args(args_list)


def _prompt_for_password() -> str | None:
    for _ in range(3):
        password = getpass("Password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def _generate(
    schema_path: str,
    output: str,
    header: str,
    exclude_fields: Iterable[str],
    raise_errors: bool = False,
) -> int:
    try:
        sdl = Path(schema_path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Error reading schema file: {exc}", file=sys.stderr)
        return 1

    try:
        source = render_module(
            sdl,
            header.replace("\\n", "\n"),
            exclude_fields,
            raise_errors=raise_errors,
        )
    except SchemaError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if output == "-":
        sys.stdout.write(source)
        return 0

    try:
        Path(output).write_text(source, encoding="utf-8")
    except OSError as exc:
        print(f"Error creating output file: {exc}", file=sys.stderr)
        return 1
    logger.info("Generated %s from %s", output, schema_path)
    return 0


def _load_config(config: str | None, endpoint: str | None) -> ClientConfig:
    config_path = resolve_config_path(config or os.getenv("USERGQL_CONFIG"))
    if config and not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    environ = dict(os.environ)
    if endpoint:
        environ["USERGQL_ENDPOINT"] = endpoint
    return load_client_config(config_path, environ)


async def _run_operation(config: ClientConfig, operation: str, arguments: Dict[str, Any]) -> Result:
    async with HTTPGraphQLClient.from_config(config) as client:
        facade = UserFacade(client)
        if operation in facade.query:
            return await facade.query[operation](**arguments)
        return await facade.mutation[operation](**arguments)


def _operation_arguments(args: argparse.Namespace) -> Dict[str, Any] | None:
    if args.command == "users":
        return {}
    if args.command in ("user", "delete-user"):
        return {"id": args.id}
    if args.command == "create-user":
        password = _prompt_for_password()
        if password is None:
            return None
        return {"name": args.name.strip(), "email": args.email.strip(), "password": password}
    if args.command == "update-user":
        arguments: Dict[str, Any] = {"id": args.id, "name": args.name, "email": args.email}
        if args.change_password:
            password = _prompt_for_password()
            if password is None:
                return None
            arguments["password"] = password
        return arguments
    raise ValueError(f"Unknown command: {args.command}")


def _print_user(user: User) -> None:
    print(f"ID:      {user.id}")
    print(f"Name:    {user.name}")
    print(f"Email:   {user.email}")
    print(f"Created: {user.created_at}")
    print(f"Updated: {user.updated_at}")


def _print_users(users: Sequence[User]) -> None:
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<12}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 80)
    for user in users:
        print(f"{user.id:<12}  {user.name:<24}  {user.email:<32}  {user.created_at}")


def _report(command: str, result: Result) -> int:
    value, error = result.as_pair()
    if error is not None:
        print(f"Error: {error}", file=sys.stderr)
        return 1

    if command == "users":
        _print_users(value)
    else:
        if command == "delete-user":
            print(f"Deleted user {value.id}.")
        _print_user(value)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    if args.command == "generate":
        return _generate(
            args.schema,
            args.output,
            args.header,
            args.exclude_fields,
            raise_errors=args.raise_errors,
        )

    try:
        config = _load_config(args.config, args.endpoint)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    arguments = _operation_arguments(args)
    if arguments is None:
        print("Aborted: no password was set.", file=sys.stderr)
        return 1

    operation = _OPERATION_COMMANDS[args.command]
    result = asyncio.run(_run_operation(config, operation, arguments))
    return _report(args.command, result)


if __name__ == "__main__":
    raise SystemExit(main())
