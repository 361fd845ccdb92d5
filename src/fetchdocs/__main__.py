"""Entry point: python -m fetchdocs [--force] [--verbose] [--dumponly]

- Default:     download every item's manifest into the docs tree
- --dumponly:  dry run, print where each file would be written
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from fetchdocs.config import load_config
from fetchdocs.driver import DriverOptions, run
from fetchdocs.errors import ManifestError, RemoteStatusError


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fetchdocs",
        description="Fetch plugin docs from their repositories into the docs tree.",
    )
    parser.add_argument(
        "--force",
        "--clean",
        dest="force",
        action="store_true",
        help="overwrite a non-empty fetch directory",
    )
    parser.add_argument("--verbose", action="store_true", help="print progress details")
    parser.add_argument(
        "--dumponly",
        dest="dump_only",
        action="store_true",
        help="only report destination paths, no downloads",
    )
    parser.add_argument("--config", type=Path, default=None, help="path to fetchdocs.toml")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = load_config(args.config)
    _setup_logging("DEBUG" if args.verbose else config.log_level)

    options = DriverOptions(force=args.force, dump_only=args.dump_only)
    try:
        result = asyncio.run(run(config, options))
    except ManifestError as e:
        print(f"fetchdocs: {e}", file=sys.stderr)
        return 1
    except RemoteStatusError as e:
        print(f"fetchdocs: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130

    if options.dump_only:
        for item in result.items:
            if item.dumped is not None:
                for path in item.dumped.paths:
                    print(path)

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
