"""Shared CLI argument parsing: common pipeline flags and config loading."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from polkabind_tooling.config import PipelineConfig, load_config
from polkabind_tooling.errors import ConfigError


def path_resolver(s: str) -> Path:
    """Resolve a path argument to absolute Path (e.g. --project-root, --staging)."""
    return Path(s).resolve()


def common_parser() -> argparse.ArgumentParser:
    """Parent parser with flags every pipeline command accepts."""
    ap = argparse.ArgumentParser(add_help=False)
    ap.add_argument(
        "--project-root",
        type=path_resolver,
        default=Path.cwd(),
        help="Polkabind checkout (default: cwd)",
    )
    ap.add_argument(
        "--config",
        type=path_resolver,
        default=None,
        help="Config file (default: <project-root>/polkabind.yaml if present)",
    )
    ap.add_argument("--profile", default=None, help="Config profile: local, ci, or one from the file")
    ap.add_argument("--jobs", type=int, default=None, help="Parallel cross-compile workers")
    ap.add_argument(
        "--keep-going",
        action="store_true",
        default=None,
        help="Attempt every target even after one fails",
    )
    ap.add_argument("--no-strip", action="store_true", help="Skip symbol stripping")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def configure_logging(verbose: bool = False) -> None:
    level_name = "DEBUG" if verbose else os.environ.get("POLKABIND_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def config_from_args(args: argparse.Namespace, **extra: object) -> PipelineConfig:
    """Load PipelineConfig from parsed common flags. Exits 1 on ConfigError."""
    configure_logging(getattr(args, "verbose", False))
    overrides: dict[str, object] = {
        "jobs": args.jobs,
        "keep_going": args.keep_going,
        "strip": False if args.no_strip else None,
    }
    overrides.update(extra)
    try:
        return load_config(
            args.project_root,
            config_path=args.config,
            profile=args.profile,
            overrides=overrides,
        )
    except ConfigError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
