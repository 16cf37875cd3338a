"""Best-effort symbol stripping for cross-compiled Android libraries.

Order: NDK llvm-strip (when an NDK path is configured and the tool exists),
then the system strip on Linux, else skip. Stripping never fails the pipeline.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from pathlib import Path

from polkabind_tooling.helpers import executable_name, host_system

log = logging.getLogger(__name__)


def ndk_host_tag(system: str | None = None) -> str:
    """NDK prebuilt host directory name (linux-x86_64, darwin-x86_64, windows-x86_64).

    NDK r23+ ships x86_64 host binaries only; Apple Silicon uses them via Rosetta.
    """
    return f"{(system or host_system()).lower()}-x86_64"


def ndk_strip_path(ndk_home: Path, system: str | None = None) -> Path:
    return (
        ndk_home
        / "toolchains"
        / "llvm"
        / "prebuilt"
        / ndk_host_tag(system)
        / "bin"
        / executable_name("llvm-strip", system)
    )


def find_strip_tool(ndk_home: Path | None, system: str | None = None) -> list[str] | None:
    """Command prefix for the preferred strip tool, or None when none is usable."""
    system = system or host_system()
    if ndk_home is not None:
        candidate = ndk_strip_path(ndk_home, system)
        if candidate.is_file():
            return [str(candidate)]
        log.debug("NDK strip tool not found at %s", candidate)
    if system == "Linux":
        strip = shutil.which("strip")
        if strip:
            return [strip]
    return None


def strip_library(path: Path, ndk_home: Path | None, system: str | None = None) -> bool:
    """Strip unneeded symbols from path in place. Returns True if stripped; warns and returns False otherwise."""
    tool = find_strip_tool(ndk_home, system)
    if tool is None:
        print(
            f"⚠️  No strip tool available (set ANDROID_NDK_HOME); leaving {path.name} unstripped",
            file=sys.stderr,
        )
        return False
    cmd = [*tool, "--strip-unneeded", str(path)]
    log.debug("running %s", cmd)
    try:
        r = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        log.warning("strip failed to start for %s: %s", path, e)
        print(f"⚠️  Could not run {tool[0]}; leaving {path.name} unstripped", file=sys.stderr)
        return False
    if r.returncode != 0:
        log.warning("strip exited %s for %s: %s", r.returncode, path, (r.stderr or "").strip())
        print(f"⚠️  Stripping {path.name} failed; continuing unstripped", file=sys.stderr)
        return False
    return True
