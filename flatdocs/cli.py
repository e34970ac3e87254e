"""
flatdocs CLI — Repository bootstrap and maintenance commands.

Commands:
- flatdocs init          — Create data directories, seed the admin account
- flatdocs list          — List documents
- flatdocs show          — Print a document (or one of its versions)
- flatdocs versions      — List a document's versions
- flatdocs register      — Add an account
- flatdocs check-login   — Verify a username/password pair
- flatdocs cleanup-logs  — Apply audit log retention
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

from flatdocs.engine.config import RepositoryConfig, load_config
from flatdocs.engine.errors import ConfigError, FlatDocsError

logger = logging.getLogger("flatdocs.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="flatdocs",
        description="flatdocs — flat-file document repository",
    )
    parser.add_argument(
        "--config", default=None, help="Path to flatdocs.yaml (default: auto-discover)"
    )
    parser.add_argument(
        "--env", choices=["dev", "test", "prod"], help="Override the configured environment"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Create directories and admin account")
    init_parser.add_argument(
        "--admin-password", help="Admin password (prompted if not provided)"
    )

    subparsers.add_parser("list", help="List documents")

    show_parser = subparsers.add_parser("show", help="Print a document")
    show_parser.add_argument("name", help="Document name (e.g., about.md)")
    show_parser.add_argument("--version", type=int, help="Print this version instead")

    versions_parser = subparsers.add_parser("versions", help="List a document's versions")
    versions_parser.add_argument("name", help="Document name")

    register_parser = subparsers.add_parser("register", help="Add an account")
    register_parser.add_argument("username")
    register_parser.add_argument("--password", help="Password (prompted if not provided)")

    login_parser = subparsers.add_parser("check-login", help="Verify credentials")
    login_parser.add_argument("username")
    login_parser.add_argument("--password", help="Password (prompted if not provided)")

    subparsers.add_parser("cleanup-logs", help="Apply audit log retention")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        overrides = {"environment": args.env} if args.env else None
        config = load_config(args.config, overrides=overrides)
    except ConfigError as e:
        print(f"[ERROR] {e.message}")
        return 1

    commands = {
        "init": cmd_init,
        "list": cmd_list,
        "show": cmd_show,
        "versions": cmd_versions,
        "register": cmd_register,
        "check-login": cmd_check_login,
        "cleanup-logs": cmd_cleanup_logs,
    }
    try:
        return commands[args.command](config, args)
    except FlatDocsError as e:
        print(f"[ERROR] {e.message}")
        return 1


def _prompt_password(prompt: str = "Password: ") -> str:
    return getpass.getpass(prompt)


def cmd_init(config: RepositoryConfig, args: argparse.Namespace) -> int:
    """
    Bootstrap a repository:
    1. Create the data and image directories
    2. Create the credential file with the admin account (if missing)
    """
    from flatdocs.repository import open_repository

    repo = open_repository(config)
    print(f"[OK] Data directory: {config.data_path}")

    credentials = repo.accounts.credentials
    admin = config.security.admin_username
    if credentials.exists(admin):
        print(f"[INFO] Account '{admin}' already exists")
        return 0

    password = args.admin_password or _prompt_password(f"  Enter password for '{admin}': ")
    credentials.register(admin, password)
    print(f"[OK] Created account '{admin}' in {credentials.path}")
    return 0


def cmd_list(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.repository import open_repository

    repo = open_repository(config, initialize=False)
    for name in repo.documents.list_documents():
        print(name)
    return 0


def cmd_show(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.repository import open_repository

    repo = open_repository(config, initialize=False)
    if args.version is not None:
        text = repo.documents.read_version(args.name, args.version).text
    else:
        text = repo.documents.view(args.name).text
    sys.stdout.write(text)
    if text and not text.endswith("\n"):
        sys.stdout.write("\n")
    return 0


def cmd_versions(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.repository import open_repository

    repo = open_repository(config, initialize=False)
    versions = repo.documents.versions(args.name)
    if not versions:
        print(f"[INFO] {args.name} has no saved versions")
        return 0
    for version in versions:
        print(version)
    return 0


def cmd_register(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.repository import open_repository

    repo = open_repository(config)
    password = args.password or _prompt_password()
    repo.accounts.credentials.register(args.username, password)
    print(f"[OK] Registered '{args.username}'")
    return 0


def cmd_check_login(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.repository import open_repository

    repo = open_repository(config, initialize=False)
    password = args.password or _prompt_password()
    if repo.accounts.credentials.check_credentials(args.username, password):
        print("[OK] Credentials valid")
        return 0
    print("[ERROR] Invalid Credentials!")
    return 1


def cmd_cleanup_logs(config: RepositoryConfig, args: argparse.Namespace) -> int:
    from flatdocs.engine.logging import LogRetentionManager

    manager = LogRetentionManager(
        log_dir=str(config.log_path),
        retention_days={
            "execution": config.logging.retention.execution_days,
            "security": config.logging.retention.security_days,
        },
        compress_after_days=config.logging.compress_after_days,
    )
    result = manager.cleanup()
    print(f"[OK] Deleted {result['deleted']}, compressed {result['compressed']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
