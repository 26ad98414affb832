"""CLI commands: run searches, explain plans, seed fixtures and create indexes."""

import argparse
import json
import sys
from pathlib import Path

from .adapters.fixtures import FixtureError, load_fixtures
from .adapters.mongo_store import MongoDocumentStore
from .config.runtime import StoreBackend, get_settings
from .domain.errors import SearchError
from .mcp.observability import configure_logging
from .wiring import build_search_service


def parse_query_params(pairs: list[str]) -> dict[str, str | list[str]]:
    """Turn ``key=value`` arguments into a parameter mapping; repeated keys become lists."""
    params: dict[str, str | list[str]] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            print(f"Error: expected key=value, got {pair!r}", file=sys.stderr)
            sys.exit(2)
        if key in params:
            existing = params[key]
            params[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def _mongo_store() -> MongoDocumentStore:
    settings = get_settings()
    if settings.store_backend != StoreBackend.mongo:
        print("Error: this command needs STORE_BACKEND=mongo.", file=sys.stderr)
        sys.exit(1)
    return MongoDocumentStore(settings)


def seed_fixtures(file_path: Path | None = None) -> None:
    """Load a fixture file and upsert every collection into MongoDB."""
    path = file_path if file_path is not None else get_settings().fixtures_path
    try:
        fixtures = load_fixtures(path)
    except FixtureError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    total = sum(len(docs) for docs in fixtures.values())
    print(f"Seeding {total} documents from {path}...")
    counts = _mongo_store().seed(fixtures)
    for name, count in sorted(counts.items()):
        print(f"  {name}: {count}")


def main():
    parser = argparse.ArgumentParser(description="Search marketplace advertisements and manage the search store")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    search_parser = subparsers.add_parser("search", help="Run one search and print the JSON response")
    search_parser.add_argument("params", nargs="*", help="Query parameters as key=value (repeat a key for lists)")

    explain_parser = subparsers.add_parser("explain", help="Print the plan a search would use, without running it")
    explain_parser.add_argument("params", nargs="*", help="Query parameters as key=value")

    owner_parser = subparsers.add_parser("owner", help="List one owner's advertisements")
    owner_parser.add_argument("owner_id", help="Owning user's id")
    owner_parser.add_argument("params", nargs="*", help="Query parameters as key=value")

    seed_parser = subparsers.add_parser("seed", help="Load a JSON fixture file into MongoDB")
    seed_parser.add_argument(
        "--file",
        type=Path,
        default=None,
        help="Path to the fixture file (default: FIXTURES_PATH setting)",
    )

    subparsers.add_parser("ensure-indexes", help="Create the MongoDB indexes used by search")
    subparsers.add_parser("health", help="Check that the document store is reachable")

    args = parser.parse_args()
    configure_logging(get_settings().log_level)

    try:
        if args.command == "search":
            response = build_search_service().search(parse_query_params(args.params))
            print(json.dumps(response.to_json_dict(), indent=2))
        elif args.command == "explain":
            print(json.dumps(build_search_service().explain(parse_query_params(args.params)), indent=2))
        elif args.command == "owner":
            response = build_search_service().list_owner_advertisements(
                args.owner_id, parse_query_params(args.params)
            )
            print(json.dumps(response.to_json_dict(), indent=2))
        elif args.command == "seed":
            seed_fixtures(args.file)
        elif args.command == "ensure-indexes":
            names = _mongo_store().ensure_indexes()
            print(f"Ensured {len(names)} indexes: {', '.join(names)}")
        elif args.command == "health":
            result = build_search_service().health()
            print(json.dumps(result))
            if not result["ok"]:
                sys.exit(1)
        else:
            parser.print_help()
    except SearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2 if e.status == 400 else 1)


if __name__ == "__main__":
    main()
