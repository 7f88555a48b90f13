#!/usr/bin/env python
"""
Case File CLI
=============
Operator commands against the case file record store.

Usage:
    python -m cli.casefile list cases
    python -m cli.casefile list evidence --case <case_id>
    python -m cli.casefile get suspects <id>
    python -m cli.casefile add cases --data '{"caseNumber": "CASE-42", "title": "Warehouse theft"}'
    python -m cli.casefile update cases <id> --data '{"status": "closed"}'
    python -m cli.casefile delete cases <id>
    python -m cli.casefile search warehouse
    python -m cli.casefile stats

Every command prints JSON to stdout. Logs go to stderr.
"""

import argparse
import json
import sys
from pathlib import Path

from config import get_settings
from models.records import CASE_SCOPED_COLLECTIONS, COLLECTIONS
from services.document_store import JsonDocumentStore
from services.errors import StoreWriteError
from services.record_store import RecordStore
from services.structured_logging import configure_logging


def _get_store(args) -> RecordStore:
    settings = get_settings()
    path = settings.database_path
    if args.data_dir:
        path = Path(args.data_dir) / settings.database_filename
    return RecordStore(JsonDocumentStore(path))


def _emit(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _parse_data(raw):
    try:
        data = json.loads(raw) if raw else {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"--data is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("--data must be a JSON object")
    return data


def cmd_list(args) -> int:
    store = _get_store(args)
    if args.case:
        records = store.list_by_case(args.collection, args.case)
    else:
        records = store.list(args.collection)
    _emit([r.to_wire() for r in records])
    return 0


def cmd_get(args) -> int:
    record = _get_store(args).get(args.collection, args.id)
    if record is None:
        print(f"  Error: {args.collection}/{args.id} not found.", file=sys.stderr)
        return 1
    _emit(record.to_wire())
    return 0


def cmd_add(args) -> int:
    record = _get_store(args).add(args.collection, _parse_data(args.data))
    _emit(record.to_wire())
    return 0


def cmd_update(args) -> int:
    record = _get_store(args).update(args.collection, args.id, _parse_data(args.data))
    if record is None:
        print(f"  Error: {args.collection}/{args.id} not found.", file=sys.stderr)
        return 1
    _emit(record.to_wire())
    return 0


def cmd_delete(args) -> int:
    _emit({"success": _get_store(args).delete(args.collection, args.id)})
    return 0


def cmd_search(args) -> int:
    results = _get_store(args).search(args.query)
    _emit({name: [r.to_wire() for r in records] for name, records in results.items()})
    return 0


def cmd_stats(args) -> int:
    _emit(_get_store(args).stats().to_dict())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="casefile",
        description="Case file record store CLI",
    )
    parser.add_argument("--data-dir", help="Directory holding the record document")
    parser.add_argument("--log-level", default="WARNING", help="Log level for stderr output")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    collections = sorted(COLLECTIONS)

    list_parser = subparsers.add_parser("list", help="List a collection")
    list_parser.add_argument("collection", choices=collections)
    list_parser.add_argument(
        "--case",
        help=f"Only records of this case ({', '.join(CASE_SCOPED_COLLECTIONS)})",
    )
    list_parser.set_defaults(func=cmd_list)

    get_parser = subparsers.add_parser("get", help="Show one record")
    get_parser.add_argument("collection", choices=collections)
    get_parser.add_argument("id", help="Record ID")
    get_parser.set_defaults(func=cmd_get)

    add_parser = subparsers.add_parser("add", help="Create a record")
    add_parser.add_argument("collection", choices=collections)
    add_parser.add_argument("--data", "-d", default="{}", help="JSON object of record fields")
    add_parser.set_defaults(func=cmd_add)

    update_parser = subparsers.add_parser("update", help="Merge fields into a record")
    update_parser.add_argument("collection", choices=collections)
    update_parser.add_argument("id", help="Record ID")
    update_parser.add_argument("--data", "-d", default="{}", help="JSON object of fields to merge")
    update_parser.set_defaults(func=cmd_update)

    delete_parser = subparsers.add_parser("delete", help="Delete a record (cases cascade)")
    delete_parser.add_argument("collection", choices=collections)
    delete_parser.add_argument("id", help="Record ID")
    delete_parser.set_defaults(func=cmd_delete)

    search_parser = subparsers.add_parser("search", help="Search all collections")
    search_parser.add_argument("query", help="Case-insensitive substring")
    search_parser.set_defaults(func=cmd_search)

    stats_parser = subparsers.add_parser("stats", help="Dashboard counts")
    stats_parser.set_defaults(func=cmd_stats)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "func", None):
        parser.print_help()
        return 2

    configure_logging(args.log_level, stream=sys.stderr)

    try:
        return args.func(args)
    except StoreWriteError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
