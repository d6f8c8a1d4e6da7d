"""Command-line interface for the workspace account purge service."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

from workspace_purge.config import Settings, load_settings

logger = logging.getLogger("workspace_purge.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Workspace account purge utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML settings file (default: PURGE_CONFIG_PATH or config/purge.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP control page")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the service")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the HTTP service (default: 8000)",
    )

    for name, help_text in (
        ("list", "Print the accounts whose username matches the pattern"),
        ("purge", "Delete every matching account, one at a time"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--domain", default=None, help="Override the target domain")
        sub.add_argument(
            "--length",
            type=int,
            default=None,
            help="Override the username length",
        )
        if name == "purge":
            sub.add_argument(
                "--yes",
                action="store_true",
                help="Skip the interactive confirmation prompt",
            )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "list", "purge"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help") or first == "--config" or first.startswith("--config="):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config).expanduser() if args.config else None
    try:
        settings = load_settings(config_path)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    overrides: Dict[str, Any] = {}
    if getattr(args, "domain", None):
        overrides["domain"] = args.domain
    if getattr(args, "length", None) is not None:
        overrides["username_length"] = args.length
    if overrides:
        try:
            settings = settings.with_overrides(**overrides)
        except ValueError as exc:
            raise SystemExit(f"Invalid option: {exc}") from exc
    return settings


def _serve(settings: Settings, *, host: str, port: int) -> None:
    from workspace_purge.service import create_app
    import uvicorn

    logger.info("Starting purge control page on http://%s:%s", host, port)
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level="info")


def _fetch_matching(settings: Settings, client) -> tuple[Any, List[Dict[str, Any]]]:
    from workspace_purge.directory import DirectoryClient
    from workspace_purge.filters import filter_by_pattern
    from workspace_purge.tokens import TokenProvider

    token = TokenProvider(
        settings.credentials,
        client=client,
        token_endpoint=settings.token_endpoint,
    ).fetch_access_token()
    directory = DirectoryClient(client, base_url=settings.directory_base_url)
    users = directory.list_all_users(token, settings.domain)
    return token, filter_by_pattern(users, settings.domain, settings.username_length)


def _list_users(settings: Settings) -> int:
    from workspace_purge.directory import ListError
    from workspace_purge.tokens import AuthError
    from workspace_purge.transport import open_client

    with open_client(settings) as client:
        try:
            _, matched = _fetch_matching(settings, client)
        except (AuthError, ListError) as exc:
            print(f"Failed to list users: {exc}")
            return 1

    for user in matched:
        print(user["primaryEmail"])
    print(f"{len(matched)} matching user(s) in {settings.domain}.")
    return 0


def _purge_users(settings: Settings, *, assume_yes: bool) -> int:
    from workspace_purge.bulk import run_bulk_delete
    from workspace_purge.directory import DirectoryClient, ListError
    from workspace_purge.tokens import AuthError
    from workspace_purge.transport import open_client

    with open_client(settings) as client:
        try:
            token, matched = _fetch_matching(settings, client)
        except (AuthError, ListError) as exc:
            print(f"Failed to list users: {exc}")
            return 1

        if not matched:
            print("No matching users.")
            return 0

        if not assume_yes:
            answer = input(f"Delete {len(matched)} user(s)? This cannot be undone. [y/N]: ").strip().lower()
            if answer not in {"y", "yes"}:
                print("Aborted.")
                return 1

        def _report(progress, outcome) -> None:
            marker = "ok" if outcome.ok else f"FAILED ({outcome.status_code}): {outcome.detail.strip()}"
            print(f"{progress.attempted} / {progress.total}  {outcome.email}  {marker}")

        directory = DirectoryClient(client, base_url=settings.directory_base_url)
        progress = run_bulk_delete(directory, token, matched, on_progress=_report)

    print(f"Done. Succeeded: {progress.succeeded}, failed: {progress.failed}")
    return 0 if progress.failed == 0 else 1


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = _load_settings(args)

    if args.command == "serve":
        _serve(settings, host=getattr(args, "host", "127.0.0.1"), port=getattr(args, "port", 8000))
    elif args.command == "list":
        raise SystemExit(_list_users(settings))
    elif args.command == "purge":
        raise SystemExit(_purge_users(settings, assume_yes=args.yes))


if __name__ == "__main__":
    main()
