"""Command line access to the event type API."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Callable, Mapping
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from nakadi.client import Client
from nakadi.config import ClientOptions, RetryOptions, nakadi_url_from_env
from nakadi.errors import NakadiError
from nakadi.events import EventAPI
from nakadi.models.event_type import EventType

type ClientFactory = Callable[[str, ClientOptions], Client]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage Nakadi event types")
    parser.add_argument("--url", help="Nakadi base URL (default: $NAKADI_URL)")
    parser.add_argument(
        "--retry",
        action="store_true",
        help="Retry failed requests with exponential backoff",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List all event types")
    get = subparsers.add_parser("get", help="Show one event type")
    get.add_argument("name")
    create = subparsers.add_parser("create", help="Create an event type from a JSON file")
    create.add_argument("file", type=Path)
    update = subparsers.add_parser("update", help="Update an event type from a JSON file")
    update.add_argument("file", type=Path)
    delete = subparsers.add_parser("delete", help="Delete an event type")
    delete.add_argument("name")
    return parser


def _load_event_type(path: Path) -> EventType:
    return EventType.model_validate_json(path.read_text(encoding="utf-8"))


def _dump(value: object) -> str:
    return json.dumps(value, indent=2, sort_keys=True) + "\n"


def main(
    argv: list[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    client_factory: ClientFactory = Client,
) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    url = args.url or nakadi_url_from_env(environ)
    if not url:
        sys.stderr.write("error: --url or NAKADI_URL is required\n")
        return 2

    try:
        retry_options = RetryOptions.from_env(environ)
        client_options = ClientOptions.from_env(environ)
    except ValueError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if args.retry:
        retry_options = replace(retry_options, retry=True)

    with client_factory(url, client_options) as client:
        api = EventAPI(client, retry_options)
        try:
            if args.command == "list":
                event_types = api.list()
                sys.stdout.write(_dump([item.to_payload() for item in event_types]))
            elif args.command == "get":
                sys.stdout.write(_dump(api.get(args.name).to_payload()))
            elif args.command == "create":
                api.create(_load_event_type(args.file))
            elif args.command == "update":
                api.update(_load_event_type(args.file))
            elif args.command == "delete":
                api.delete(args.name)
        except (ValidationError, OSError) as exc:
            sys.stderr.write(f"error: invalid event type file: {exc}\n")
            return 2
        except ValueError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 2
        except NakadiError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
