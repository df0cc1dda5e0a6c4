"""Command-line interface for the Arive Lab portal service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from arivelab.config import Settings, load_seed_content, resolve_database_path, resolve_seed_path
from arivelab.database import Database

logger = logging.getLogger("arivelab.main")

_KNOWN_COMMANDS = {"serve", "init-db", "seed", "users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Arive Lab portal utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Create the portal database schema")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port for the API (default: 8000)")
    serve_parser.add_argument(
        "--ssl-certfile",
        default=None,
        help="Path to the TLS certificate chain in PEM format",
    )
    serve_parser.add_argument(
        "--ssl-keyfile",
        default=None,
        help="Path to the TLS private key in PEM format",
    )

    seed_parser = subparsers.add_parser("seed", help="Load default site content into empty tables")
    seed_parser.add_argument(
        "--file",
        dest="seed_file",
        default=None,
        help="YAML seed file (defaults to ARIVELAB_SEED_PATH or config/seed.yaml)",
    )

    subparsers.add_parser("users", help="List registered accounts and their status")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    if not args_list:
        args_list = ["serve"]
    elif args_list[0] not in _KNOWN_COMMANDS and args_list[0] not in ("-h", "--help"):
        args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database() -> Database:
    db_path = resolve_database_path(os.getenv("ARIVELAB_DB_PATH"))
    database = Database(db_path)
    database.initialize()
    logger.info("Database initialised at %s", db_path)
    return database


def _serve(
    *,
    database: Database,
    host: str,
    port: int,
    ssl_certfile: str | None,
    ssl_keyfile: str | None,
) -> None:
    from arivelab.service import create_app
    import uvicorn

    if bool(ssl_certfile) ^ bool(ssl_keyfile):
        raise SystemExit("Both --ssl-certfile and --ssl-keyfile must be provided together.")

    try:
        settings = Settings.from_env()
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    protocol = "https" if ssl_certfile and ssl_keyfile else "http"
    logger.info("Starting Arive Lab API on %s://%s:%s", protocol, host, port)

    app = create_app(settings=settings, database=database)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info",
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )


def _seed(database: Database, seed_file: str | None) -> int:
    path = Path(seed_file).expanduser() if seed_file else resolve_seed_path(os.getenv("ARIVELAB_SEED_PATH"))
    try:
        content = load_seed_content(path)
    except FileNotFoundError:
        print(f"Seed file not found: {path}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid seed file {path}: {exc}", file=sys.stderr)
        return 1

    inserted = database.seed_content(content)
    for section, count in inserted.items():
        if count:
            print(f"{section}: inserted {count} row(s)")
        else:
            print(f"{section}: already populated, skipped")
    return 0


def _list_users(database: Database) -> int:
    users = database.list_users()
    if not users:
        print("No users are currently registered.")
        return 0

    headers = ("ID", "Name", "Email", "Role", "Status")
    rows = [(str(user.id), user.name, user.email, user.role.value, user.status.value) for user in users]
    widths = [max(len(header), *(len(row[index]) for row in rows)) for index, header in enumerate(headers)]
    print("  ".join(header.ljust(width) for header, width in zip(headers, widths)))
    for row in rows:
        print("  ".join(value.ljust(width) for value, width in zip(row, widths)))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    database = _initialise_database()

    if args.command == "serve":
        _serve(
            database=database,
            host=args.host,
            port=args.port,
            ssl_certfile=args.ssl_certfile,
            ssl_keyfile=args.ssl_keyfile,
        )
    elif args.command == "seed":
        return _seed(database, args.seed_file)
    elif args.command == "users":
        return _list_users(database)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
