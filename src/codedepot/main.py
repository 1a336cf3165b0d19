"""Command line entry point."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .auth.credential_store import CredentialStore, ConfigurationError
from .config.settings import get_settings
from .core.connector import CodeDepot, Notifier
from .core.models import InvalidFileNameError
from .utils.logging import setup_logging, get_logger


class ConsoleNotifier(Notifier):
    """Prints outcome messages for the terminal user."""

    def success(self, message: str) -> None:
        super().success(message)
        print(message, file=sys.stderr)

    def error(self, message: str) -> None:
        super().error(message)
        print(f"error: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="codedepot",
        description="Store small text files in a namespaced folder of a GitHub repository.",
    )
    parser.add_argument("--settings", help=f"Settings file (default: {settings.storage.settings_path})")
    parser.add_argument("--log-level", help="Logging level")

    commands = parser.add_subparsers(dest="command", required=True)

    configure = commands.add_parser("configure", help="Store the GitHub token and repository")
    configure.add_argument("token", help="GitHub personal access token")
    configure.add_argument("repository", help="Repository as owner/name")

    login = commands.add_parser("login", help="Use an existing access key")
    login.add_argument("key", help="Access key")

    commands.add_parser("keygen", help="Generate and store a new access key")
    commands.add_parser("logout", help="Forget the access key")
    commands.add_parser("ls", help="List files in the namespace")

    cat = commands.add_parser("cat", help="Print a file")
    cat.add_argument("name")

    put = commands.add_parser("put", help="Save a file from a local path or stdin")
    put.add_argument("name")
    put.add_argument("--file", dest="source", help="Read content from this path instead of stdin")
    put.add_argument("--force", action="store_true", help="Overwrite even if the remote file changed")

    rm = commands.add_parser("rm", help="Delete a file")
    rm.add_argument("name")

    return parser


async def run(args: argparse.Namespace) -> int:
    """Execute one command and return the exit status."""
    depot = CodeDepot(store=CredentialStore(args.settings), notifier=ConsoleNotifier())

    if args.command == "configure":
        depot.configure(args.token, args.repository)
        return 0
    if args.command == "login":
        depot.login(args.key)
        return 0
    if args.command == "keygen":
        print(depot.generate_key())
        return 0
    if args.command == "logout":
        depot.logout()
        return 0

    result = await depot.refresh()
    if not result.success:
        return 1

    if args.command == "ls":
        for remote_file in depot.files:
            print(f"{remote_file.name}\t{remote_file.language}")
        return 0

    if args.command == "cat":
        remote_file = depot.select(args.name)
        if remote_file is None:
            print(f"error: {args.name} not found", file=sys.stderr)
            return 1
        sys.stdout.write(remote_file.content)
        return 0

    if args.command == "put":
        content = Path(args.source).read_text(encoding="utf-8") if args.source else sys.stdin.read()
        if depot.select(args.name) is None and depot.new_file(args.name) is None:
            return 1
        depot.edit(content)
        result = await depot.save(args.name, overwrite=args.force)
        return 0 if result.success else 1

    if args.command == "rm":
        result = await depot.delete(args.name)
        return 0 if result.success else 1

    return 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level)
    logger = get_logger("main")

    try:
        return asyncio.run(run(args))
    except (ConfigurationError, InvalidFileNameError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
