"""
Copyright (c) 2024 Aiven Ltd
See LICENSE for details

Main module for graphbr.

"""

from graphbr import cli, manifest

import argparse
import logging
import sys

LOG_FORMAT = "%(levelname)s\t%(name)s\t%(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # paramiko is very chatty on INFO about its transport
    logging.getLogger("paramiko").setLevel(max(logging.getLogger().level, logging.WARNING))


def main():
    parser = argparse.ArgumentParser(description="graphbr - graph database cluster backup and restore tool")
    parser.add_argument(
        "--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )
    subparsers = parser.add_subparsers(title="Commands")
    cli.create_client_parsers(parser, subparsers)
    manifest.create_manifest_parsers(parser, subparsers)
    args = parser.parse_args()
    _configure_logging(args.log_level)
    try:
        func = args.func
    except AttributeError:
        parser.print_help(sys.stderr)
        sys.exit(1)
    success = func(args)
    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
