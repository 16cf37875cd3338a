"""CLI for ci: polkabind ci tag-version."""

from __future__ import annotations

import sys

from polkabind_tooling.ci import run_tag_version


def run_ci_argv(argv: list[str] | None = None) -> None:
    """Dispatch polkabind ci <subcommand>."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("Usage: polkabind ci <subcommand> [options]", file=sys.stderr)
        print("Subcommands: tag-version", file=sys.stderr)
        sys.exit(1)

    sub = argv[0].lower()

    if sub == "tag-version":
        sys.exit(run_tag_version())

    print(f"Error: Unknown ci subcommand: {sub}", file=sys.stderr)
    sys.exit(1)
