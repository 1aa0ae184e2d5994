"""Command-line entry point for talking to a Transmission daemon.

Connection settings come from the environment (or a .env file), see
``config_manager.Config``. Examples::

    transmission-sdk list
    transmission-sdk add "magnet:?xt=urn:btih:..." --dir /downloads
    transmission-sdk stop 1 2 3
    transmission-sdk stats
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from .client import Client
from .config_manager import load_config
from .exceptions import ConfigurationError, TransmissionError
from .utils.logger import get_logger, setup_logging
from .utils.validators import parse_id


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="transmission-sdk", description="Transmission RPC client")
    parser.add_argument("--env-file", default=None, help="Path to a .env file with connection settings")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List torrents")

    add = sub.add_parser("add", help="Add a torrent by magnet/URL or local .torrent file")
    add.add_argument("source")
    add.add_argument("--dir", dest="download_dir", default=None)

    for name in ("start", "stop"):
        cmd = sub.add_parser(name, help=f"{name.capitalize()} torrents (all when no id is given)")
        cmd.add_argument("ids", nargs="*")

    remove = sub.add_parser("remove", help="Remove torrents")
    remove.add_argument("ids", nargs="+")
    remove.add_argument("--delete-data", action="store_true")

    sub.add_parser("stats", help="Show session statistics")

    free = sub.add_parser("free-space", help="Show free space on the daemon host")
    free.add_argument("path", nargs="?", default=None)
    return parser


def _selector(tokens: List[str]):
    if not tokens:
        return None
    return [parse_id(token) for token in tokens]


def run(client: Client, args: argparse.Namespace) -> None:
    """Execute the parsed command against ``client`` and print the outcome."""
    if args.command == "list":
        for torrent in client.get_all():
            percent = float(torrent.get("percentDone") or 0) * 100
            print(f"{torrent.get('id'):>4}  {percent:5.1f}%  {torrent.get('name')}")
    elif args.command == "add":
        if os.path.isfile(args.source):
            with open(args.source, "rb") as handle:
                added = client.add_file(handle.read(), args.download_dir)
        else:
            added = client.add_url(args.source, args.download_dir)
        label = "Already present" if added.get("duplicate") else "Added"
        print(f"{label}: {added.get('name')} (id {added.get('id')})")
    elif args.command == "start":
        client.start(_selector(args.ids))
        print("Started")
    elif args.command == "stop":
        client.stop(_selector(args.ids))
        print("Stopped")
    elif args.command == "remove":
        client.remove(_selector(args.ids), delete_local_data=args.delete_data)
        print("Removed")
    elif args.command == "stats":
        print(json.dumps(client.session_stats(), indent=2, sort_keys=True))
    elif args.command == "free-space":
        print(json.dumps(client.free_space(args.path), indent=2, sort_keys=True))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entrypoint for the CLI."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.env_file)
    except ConfigurationError as exc:
        print(f"Failed to load configuration: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.log_level, config.log_file)
    logger = get_logger("cli")

    client = Client.from_config(config)
    try:
        run(client, args)
    except TransmissionError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
