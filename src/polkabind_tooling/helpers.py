"""Shared helpers for polkabind_tooling (version, host platform naming, filesystem, redaction).

Used by build, bindings, assemble, publish, and ci modules.
"""

from __future__ import annotations

import platform
import re
import shutil
from functools import cmp_to_key
from pathlib import Path

SEMVER_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)(?:-([\w.-]+))?$")

# --- Version ---


def normalize_version(v: str) -> str:
    """Strip a leading 'v' and validate X.Y.Z[-pre]. Raises ValueError on invalid format."""
    v = v.strip().lstrip("v")
    if not SEMVER_RE.match(v):
        msg = "Invalid version format: " + str(v)
        raise ValueError(msg)
    return v


def compare_versions(v1: str, v2: str) -> int:
    """Compare two version strings (semver). Returns positive if v1 > v2, negative if v1 < v2, zero if equal. Raises ValueError on invalid format."""
    v1 = v1.lstrip("v")
    v2 = v2.lstrip("v")

    def parse_version(v: str) -> tuple[int, int, int, str | None]:
        m = SEMVER_RE.match(v)
        if not m:
            msg = "Invalid version format: " + str(v)
            raise ValueError(msg)
        return (int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))

    major1, minor1, patch1, prerelease1 = parse_version(v1)
    major2, minor2, patch2, prerelease2 = parse_version(v2)

    if major1 != major2:
        return major1 - major2
    if minor1 != minor2:
        return minor1 - minor2
    if patch1 != patch2:
        return patch1 - patch2

    if prerelease1 is None and prerelease2 is not None:
        return 1
    if prerelease1 is not None and prerelease2 is None:
        return -1
    if prerelease1 is None and prerelease2 is None:
        return 0

    rc_match1 = re.match(r"^rc\.(\d+)$", prerelease1)
    rc_match2 = re.match(r"^rc\.(\d+)$", prerelease2)
    if rc_match1 and rc_match2:
        return int(rc_match1.group(1)) - int(rc_match2.group(1))

    if prerelease1 < prerelease2:
        return -1
    if prerelease1 > prerelease2:
        return 1
    return 0


def sort_versions(versions: list[str]) -> list[str]:
    """Deduplicate and sort ascending: semver names first (by precedence), then anything else by string."""
    unique = sorted(set(versions))
    semver = [v for v in unique if SEMVER_RE.match(v.lstrip("v"))]
    other = [v for v in unique if not SEMVER_RE.match(v.lstrip("v"))]
    semver.sort(key=cmp_to_key(lambda a, b: compare_versions(a, b) or (a > b) - (a < b)))
    return semver + other


# --- Host platform ---


def host_system() -> str:
    """platform.system() (Linux, Darwin, Windows)."""
    return platform.system()


def host_library_name(crate: str, system: str | None = None) -> str:
    """Shared-library file name cargo produces for crate on the host OS."""
    system = system or host_system()
    if system == "Darwin":
        return f"lib{crate}.dylib"
    if system == "Windows":
        return f"{crate}.dll"
    return f"lib{crate}.so"


def executable_name(name: str, system: str | None = None) -> str:
    """Executable file name on the host OS (.exe on Windows)."""
    system = system or host_system()
    return f"{name}.exe" if system == "Windows" else name


# --- Filesystem ---


def reset_dir(path: Path) -> Path:
    """Remove path (file or tree) if present and recreate it as an empty directory."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
    path.mkdir(parents=True)
    return path


def copy_tree_contents(src: Path, dest: Path) -> list[Path]:
    """Copy every entry of src into dest (like `cp -R src/* dest`). Returns top-level copied paths."""
    copied: list[Path] = []
    for entry in sorted(src.iterdir()):
        target = dest / entry.name
        if entry.is_dir():
            shutil.copytree(entry, target, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, target)
        copied.append(target)
    return copied


# --- Output ---


def redact(text: str, secret: str | None) -> str:
    """Replace secret in text with ***."""
    if not secret:
        return text
    return text.replace(secret, "***")
