"""Module entrypoint for ``python -m project_tracker`` and ``mcp-project-tracker``."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from project_tracker.core.config import TrackerConfig
from project_tracker.core.exceptions import ConfigurationError
from project_tracker.server import run_stdio

logger = logging.getLogger("project_tracker")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-project-tracker",
        description="Project/task tracking tools over newline-delimited JSON-RPC on stdio.",
    )
    parser.add_argument(
        "--database-url",
        help="Async SQLAlchemy URL (overrides TRACKER_DATABASE_URL)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="stderr log level (overrides TRACKER_LOG_LEVEL)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.log_level:
        overrides["log_level"] = args.log_level
    try:
        config = TrackerConfig(**overrides)
    except ValidationError as exc:
        print(f"Invalid configuration:\n{exc}", file=sys.stderr)
        return 2

    # stdout carries the protocol; logs go to stderr only
    logging.basicConfig(
        level=config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.debug("Configuration: %s", config)

    try:
        asyncio.run(run_stdio(config))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except ConfigurationError as exc:
        logger.error("%s", exc.message)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
