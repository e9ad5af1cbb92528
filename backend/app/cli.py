"""Command-line launcher for the Mentat API server."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Sequence

import uvicorn

from .config import Settings, load_settings
from .infra.logging import configure_logging, get_logger
from .main import create_app

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("-H", "--host", help="host to listen on")
    parser.add_argument("-p", "--port", type=int, help="port to listen on")
    parser.add_argument("-d", "--dbhost", help="database URL to connect to")
    parser.add_argument("--profile", help="configuration profile name")
    return parser


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Apply command-line overrides on top of the loaded profile."""

    settings = load_settings(profile=args.profile)
    rpc = replace(
        settings.rpc,
        host=args.host or settings.rpc.host,
        port=args.port if args.port is not None else settings.rpc.port,
    )
    return replace(
        settings,
        rpc=rpc,
        database_url=args.dbhost or settings.database_url,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)
    configure_logging(settings.logging.level, settings.logging.format)

    if not settings.rpc.port:
        logger.info("no port to listen on, exiting")
        sys.exit(1)
    if not settings.database_url:
        logger.info("no database url to connect to, exiting")
        sys.exit(1)

    logger.info(
        "listening",
        extra={"host": settings.rpc.host, "port": settings.rpc.port},
    )
    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which releases
    # the store connection before the process exits.
    uvicorn.run(
        create_app(settings),
        host=settings.rpc.host,
        port=settings.rpc.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
