"""Uvicorn entrypoint for running the API server."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Optional, Sequence

import uvicorn
from dotenv import load_dotenv

from autosuggest.config.logging_config import setup_logging
from autosuggest.config.settings import ApiSettings, get_settings


def build_parser() -> argparse.ArgumentParser:
    api = ApiSettings()
    parser = argparse.ArgumentParser(description="Run the Autosuggest API server.")
    parser.add_argument("--host", default=os.environ.get("HOST", api.host), help="Bind address.")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", api.port)),
        help="Bind port (env: PORT).",
    )
    parser.add_argument("--seed", default=None, help="Seed vocabulary file (env: SEED_FILE).")
    parser.add_argument(
        "--refresh-interval",
        type=float,
        default=None,
        help="Seconds between seed file checks, 0 disables (env: REFRESH_INTERVAL).",
    )
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload.")
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """
    Export command-line overrides into the environment.

    The app is built by uvicorn through ``create_app()``, which reads its
    settings from the environment, so flags have to travel that way.
    """
    if args.seed:
        os.environ["SEED_FILE"] = args.seed
    if args.refresh_interval is not None:
        os.environ["REFRESH_INTERVAL"] = str(args.refresh_interval)
    get_settings.cache_clear()


def main(argv: Optional[Sequence[str]] = None) -> int:
    # .env values become defaults for anything not already in the environment
    load_dotenv()
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    settings = get_settings()
    setup_logging(
        log_dir=settings.logs_dir,
        settings=settings.logging,
        level=os.environ.get("LOG_LEVEL"),
    )
    logger = logging.getLogger(__name__)

    logger.info(
        "Starting API server on %s:%d (seed: %s)",
        args.host, args.port, settings.seed_path or "none",
    )
    uvicorn.run(
        "autosuggest.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
