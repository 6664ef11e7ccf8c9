"""Command-line entrypoint for the SQS processor worker.

Loads an optional .env file, reads configuration from the environment,
configures logging and runs the worker until SIGTERM/SIGINT.

Exit codes:
    0  graceful shutdown
    1  fatal startup error (queue client could not be constructed)
    2  invalid or missing configuration
"""
from __future__ import annotations

import argparse
import logging
import os
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv

from sqs_processor.config.config import LOG_FORMATS, LOG_LEVELS, LoggingConfig, load_config
from sqs_processor.errors import ConfigError
from sqs_processor.support.logging_setup import configure_logging
from sqs_processor.worker import EXIT_STARTUP_FAILURE, Worker

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqs-processor",
        description="Drain an SQS queue and expose liveness/readiness probes.",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file to load (existing environment variables win). Defaults to ./.env if present.",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Override LOG_LEVEL.")
    parser.add_argument("--log-format", choices=LOG_FORMATS, help="Override LOG_FORMAT.")
    return parser


def _load_env_file(path: Optional[str]) -> None:
    if path is not None:
        if not os.path.exists(path):
            logger.warning("Env file %s not found; continuing with process environment", path)
            return
        load_dotenv(path, override=False)
        return
    # Current working directory only; do not walk up from the package location
    load_dotenv(os.path.join(os.getcwd(), ".env"), override=False)


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, load configuration and run the worker. Returns an exit code."""
    args = make_parser().parse_args(argv)

    # Defaults until configuration is known, so startup errors are still visible
    configure_logging(LoggingConfig(level=args.log_level or "info", format=args.log_format or "text"))

    _load_env_file(args.env_file)

    try:
        config = load_config()
    except ConfigError as exc:
        logger.error("Failed to load configuration: %s", exc)
        return EXIT_CONFIG_ERROR

    if args.log_level or args.log_format:
        config = replace(
            config,
            logging=LoggingConfig(
                level=args.log_level or config.logging.level,
                format=args.log_format or config.logging.format,
            ),
        )

    configure_logging(config.logging)

    try:
        return Worker(config).run()
    except Exception as exc:
        logger.exception("Application error: %s", exc)
        return EXIT_STARTUP_FAILURE


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
