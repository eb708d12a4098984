"""
Command-line interface for the URL store.

Usage:
    url-store init-schema
    url-store save <url> <alias>
    url-store get <alias>
    url-store delete <alias>
    url-store health
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import load_config
from .common.logging_config import setup_logging
from .common.validators import is_valid_url, is_valid_alias
from .database.base import URLStoreBase
from .database.models import URLRecord
from .database.postgresql import URLStorePostgreSQL
from .errors import URLStoreError, URLExistsError, URLNotFoundError

StoreFactory = Callable[..., Awaitable[URLStoreBase]]


def _emit(payload: Dict[str, Any], ok: bool = True) -> int:
    print(json.dumps(payload, indent=2), file=sys.stdout if ok else sys.stderr)
    return 0 if ok else 1


def _failure(error: str) -> int:
    return _emit({"success": False, "error": error}, ok=False)


class URLStoreCLI:
    """Command-line front end over a ready store."""

    def __init__(self, store: URLStoreBase):
        self.store = store

    async def init_schema(self) -> int:
        """Create the url table and alias index if absent."""
        await self.store.ensure_schema()
        return _emit({"success": True, "message": "Schema ready"})

    async def save(self, url: str, alias: str) -> int:
        """Validate and store a mapping."""
        is_valid, error = is_valid_url(url)
        if not is_valid:
            return _failure(f"Invalid URL: {error}")

        is_valid, error = is_valid_alias(alias)
        if not is_valid:
            return _failure(f"Invalid alias: {error}")

        try:
            new_id = await self.store.save_url(url, alias)
        except URLExistsError:
            return _failure(f"Alias '{alias}' already exists")

        record = URLRecord(id=new_id, alias=alias, url=url)
        return _emit({"success": True, **record.to_dict()})

    async def get(self, alias: str) -> int:
        """Print the url stored under an alias."""
        try:
            url = await self.store.get_url(alias)
        except URLNotFoundError:
            return _failure(f"Alias '{alias}' not found")

        return _emit({"success": True, "alias": alias, "url": url})

    async def delete(self, alias: str) -> int:
        """Delete the mapping stored under an alias."""
        try:
            await self.store.delete_url(alias)
        except URLNotFoundError:
            return _failure(f"Alias '{alias}' not found")

        return _emit({"success": True, "alias": alias, "message": "Deleted"})

    async def health(self) -> int:
        """Report database health."""
        healthy = await self.store.health_check()
        return _emit(
            {"success": healthy, "database": "healthy" if healthy else "unhealthy"},
            ok=healthy,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="url-store",
        description="URL store CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create the table and index
  %(prog)s init-schema

  # Store a mapping
  %(prog)s save https://example.com/long/url ex1

  # Look it up
  %(prog)s get ex1

  # Remove it
  %(prog)s delete ex1
        """
    )

    parser.add_argument(
        "--db-url",
        default=None,
        help="PostgreSQL connection URL (default: from DATABASE_URL env or .env)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-schema", help="Create the url table and alias index")

    save_parser = subparsers.add_parser("save", help="Store a url under an alias")
    save_parser.add_argument("url", help="Target URL")
    save_parser.add_argument("alias", help="Alias to store it under")

    get_parser = subparsers.add_parser("get", help="Look up the url for an alias")
    get_parser.add_argument("alias", help="Alias to look up")

    delete_parser = subparsers.add_parser("delete", help="Delete an alias")
    delete_parser.add_argument("alias", help="Alias to delete")

    subparsers.add_parser("health", help="Check database health")

    return parser


async def run(
    argv: Optional[List[str]] = None,
    store_factory: StoreFactory = URLStorePostgreSQL.from_config,
) -> int:
    """Parse ``argv``, open the store, run one command and close the store."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = load_config()
    if args.db_url:
        config.database_url = args.db_url

    logger = setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        log_file=config.log_file,
        json_format=config.log_json,
        stream=sys.stderr,
    )

    try:
        store = await store_factory(config, logger=logger)
    except URLStoreError as e:
        return _failure(str(e))

    cli = URLStoreCLI(store)
    try:
        if args.command == "init-schema":
            return await cli.init_schema()
        elif args.command == "save":
            return await cli.save(args.url, args.alias)
        elif args.command == "get":
            return await cli.get(args.alias)
        elif args.command == "delete":
            return await cli.delete(args.alias)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1
    except URLStoreError as e:
        return _failure(str(e))
    finally:
        await store.close()


def main() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
