"""Derive the release version from the triggering tag (GITHUB_REF_NAME v1.2.3 -> 1.2.3)."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from polkabind_tooling.helpers import normalize_version


def version_from_ref(ref_name: str | None) -> str | None:
    """v1.2.3 -> 1.2.3. None for empty or non-semver refs (e.g. branch names)."""
    if not ref_name:
        return None
    name = ref_name.rsplit("/", 1)[-1] if ref_name.startswith("refs/tags/") else ref_name
    try:
        return normalize_version(name)
    except ValueError:
        return None


def run(env: Mapping[str, str] | None = None) -> int:
    """Print the version for the current tag and append version=<v> to $GITHUB_OUTPUT. Returns 0 or 1."""
    if env is None:
        env = os.environ
    ref = env.get("POLKABIND_VERSION") or env.get("GITHUB_REF_NAME") or env.get("GITHUB_REF")
    version = version_from_ref(ref)
    if version is None:
        print(f"Error: no release version in ref {ref!r} (expected vX.Y.Z)", file=sys.stderr)
        return 1
    print(version)

    go = env.get("GITHUB_OUTPUT")
    if go:
        with Path(go).open("a") as f:
            f.write(f"version={version}\n")
    return 0
