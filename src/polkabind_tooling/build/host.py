"""Host workspace build: cargo build --release for the host library and uniffi-bindgen.

The host library is only used for its embedded UniFFI metadata, so release
stripping is disabled for this build (CARGO_PROFILE_RELEASE_STRIP=false) and the
exported symbol table is probed for the metadata prefix before anything else
runs downstream.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import (
    IntegrityError,
    MissingArtifactError,
    MissingToolError,
    StageFailed,
)
from polkabind_tooling.helpers import executable_name, host_library_name, host_system
from polkabind_tooling.models import EXECUTABLE, SHARED_LIBRARY, Artifact

log = logging.getLogger(__name__)

BINDGEN_NAME = "uniffi-bindgen"


def host_build_env(base: dict[str, str] | None = None) -> dict[str, str]:
    """Environment for the host build with release symbol stripping turned off."""
    env = dict(os.environ if base is None else base)
    env["CARGO_PROFILE_RELEASE_STRIP"] = "false"
    return env


def host_artifact_paths(config: PipelineConfig, system: str | None = None) -> tuple[Path, Path]:
    """(library, bindgen) paths under target/release for the host OS."""
    release = config.project_root / "target" / "release"
    return (
        release / host_library_name(config.crate_name, system),
        release / executable_name(BINDGEN_NAME, system),
    )


def build_host(config: PipelineConfig) -> tuple[Artifact, Artifact]:
    """Run cargo build --release; return (host library, bindgen executable) artifacts.

    Raises MissingToolError, StageFailed, or MissingArtifactError.
    """
    if not shutil.which("cargo"):
        raise MissingToolError("cargo", "install the Rust toolchain")

    cmd = ["cargo", "build", "--release"]
    print("🛠️  Building host workspace (cargo build --release)...")
    log.debug("running %s in %s", cmd, config.project_root)
    r = subprocess.run(cmd, cwd=str(config.project_root), env=host_build_env(), check=False)
    if r.returncode != 0:
        raise StageFailed(cmd, r.returncode)

    library, bindgen = host_artifact_paths(config)
    if not library.is_file():
        raise MissingArtifactError(library, "host library")
    if not bindgen.is_file():
        raise MissingArtifactError(bindgen, "uniffi-bindgen executable")
    print(f"✅ Host library: {library.relative_to(config.project_root)}")
    return Artifact(library, SHARED_LIBRARY), Artifact(bindgen, EXECUTABLE)


def _nm_commands(library: Path, system: str) -> list[list[str]]:
    if system == "Darwin":
        return [["nm", "-gU", str(library)], ["nm", "-g", str(library)]]
    return [["nm", "-D", "--defined-only", str(library)], ["nm", "-g", str(library)]]


def exported_symbols(library: Path, system: str | None = None) -> list[str]:
    """Exported symbol names of library via nm. Raises MissingToolError or StageFailed."""
    if not shutil.which("nm"):
        raise MissingToolError("nm", "install binutils or the Xcode command line tools")
    last: subprocess.CompletedProcess | None = None
    for cmd in _nm_commands(library, system or host_system()):
        last = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if last.returncode == 0:
            names = []
            for line in last.stdout.splitlines():
                parts = line.split()
                if parts:
                    names.append(parts[-1])
            return names
        log.debug("%s failed: %s", cmd, (last.stderr or "").strip())
    raise StageFailed(cmd, last.returncode)


def probe_metadata_symbols(
    library: Path,
    prefix: str = "UNIFFI_META_",
    system: str | None = None,
) -> bool:
    """True if any exported symbol starts with prefix (Mach-O leading underscore tolerated)."""
    return any(name.lstrip("_").startswith(prefix) for name in exported_symbols(library, system))


def verify_host_library(config: PipelineConfig, library: Path) -> None:
    """Abort (IntegrityError) unless the host library exports the metadata prefix."""
    prefix = config.metadata_symbol_prefix
    if not probe_metadata_symbols(library, prefix):
        msg = (
            f"{library.name} exports no {prefix}* symbols; the host build lost its UniFFI "
            "metadata (was the library stripped?)"
        )
        raise IntegrityError(msg)
    print(f"✅ {library.name} exports {prefix}* metadata")
