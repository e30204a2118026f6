from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .app import run_auto, run_gui, run_headless
from .config import STORAGE_BACKENDS, Settings
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def _log_level(verbosity: int) -> int:
    if verbosity == 1:
        return logging.INFO
    if verbosity >= 2:
        return logging.DEBUG
    return logging.WARNING


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.load(user_path=args.config)
    # Honor CLI over config files and env vars
    if args.store is not None:
        settings.storage.backend = args.store
    if args.store_path is not None:
        settings.storage.path = str(args.store_path)
    return settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="simon-kawaii",
        description="Simon Kawaii - memory sequence game",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--gui", action="store_true", help="Force GUI mode (Arcade)")
    mode.add_argument("--headless", action="store_true", help="Force headless mode (console auto-player)")
    parser.add_argument("--store", choices=STORAGE_BACKENDS, default=None, help="Record store backend")
    parser.add_argument("--store-path", type=Path, default=None, help="File used by the json/sql store")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the symbol sequence")
    parser.add_argument("--rounds", type=int, default=3, help="Rounds the headless auto-player completes before erring")
    parser.add_argument("--config", type=Path, default=None, help="User settings YAML file")
    parser.add_argument("--fast", action="store_true", help="Headless only: run on virtual time without sleeping")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")

    args = parser.parse_args(argv)
    configure_logging(_log_level(args.verbose))
    if args.rounds < 0:
        parser.error("--rounds must be >= 0")

    settings = _load_settings(args)

    if args.gui:
        os.environ.pop("SIMON_HEADLESS", None)
        return run_gui(settings, seed=args.seed)

    if args.headless:
        os.environ["SIMON_HEADLESS"] = "1"
        return run_headless(settings, seed=args.seed, rounds=args.rounds, fast=args.fast)

    return run_auto(settings, seed=args.seed, rounds=args.rounds, fast=args.fast)


if __name__ == "__main__":
    sys.exit(main())
