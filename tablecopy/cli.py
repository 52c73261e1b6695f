"""Command-line interface for table transfers.

Usage::

    tablecopy --src=prod:Orders --dest=dev
    tablecopy --src=prod:Orders --dest=file:exports/orders.bcp
    tablecopy --src=file:exports/orders.bcp --dest=dev:Orders --batchSize=5000
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .config import load_transfer_config
from .errors import EXIT_FAILURE, EXIT_OK, SchemaMismatchError, TransferError, UsageError
from .introspection import ConnectionPool
from .transfer import DEFAULT_BATCH_SIZE, Transfer


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit code 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(description="Copy a table between database connections or flat files using a bulk-copy tool.")
    parser.add_argument("--src", help='Source connection and table separated by ":". Example: "connection:table" or "file:path"')
    parser.add_argument(
        "--dest",
        help='Destination connection and table separated by ":". The table defaults to the source table.',
    )
    parser.add_argument(
        "--batchSize",
        "--batch-size",
        dest="batch_size",
        type=_positive_int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Transaction batch size (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--config",
        action="append",
        type=Path,
        default=[],
        help="Config file (repeatable, later files override earlier ones). Default: .config.json, .config.local.json",
    )
    return parser


def _report(error: TransferError) -> None:
    if isinstance(error, SchemaMismatchError):
        for line in error.errors:
            print(line)
        return
    print(error.message, file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    pool = ConnectionPool()
    try:
        args = parser.parse_args(argv)
        config = load_transfer_config(args.config)
        transfer = Transfer.from_specifiers(
            config, args.src, args.dest, batch_size=args.batch_size, pool=pool
        )
        transfer.run()
    except UsageError as e:
        print(f"error: {e.message}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return EXIT_FAILURE
    except TransferError as e:
        _report(e)
        return e.exit_code
    finally:
        pool.close_all()
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
