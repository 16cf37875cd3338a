"""Cross-compile the crate for each Android ABI with cargo-ndk.

Each target is an independent task on a bounded worker pool (config.jobs,
default 1 = sequential). Results come back in target order. Without
keep_going, targets not yet started are skipped after the first failure.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from polkabind_tooling.build.strip import strip_library
from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError, MissingToolError, PipelineError, StageFailed
from polkabind_tooling.models import SHARED_LIBRARY, Artifact, BuildTarget, TargetResult

log = logging.getLogger(__name__)

CANCELLED = "not built: cancelled after an earlier target failed"


def cargo_ndk_command(config: PipelineConfig, target: BuildTarget) -> list[str]:
    return [
        "cargo",
        "ndk",
        "--target",
        target.triple,
        "--platform",
        str(config.android_platform),
        "build",
        "--release",
    ]


def _build_env(config: PipelineConfig) -> dict[str, str]:
    env = os.environ.copy()
    if config.ndk_home is not None:
        env["ANDROID_NDK_HOME"] = str(config.ndk_home)
    return env


def ensure_cross_tools() -> None:
    """Raise MissingToolError unless cargo and cargo-ndk are on PATH."""
    if not shutil.which("cargo"):
        raise MissingToolError("cargo", "install the Rust toolchain")
    if not shutil.which("cargo-ndk"):
        raise MissingToolError("cargo-ndk", "cargo install cargo-ndk --locked")


def build_target(config: PipelineConfig, target: BuildTarget) -> TargetResult:
    """Build, verify, and optionally strip one target. Failures are returned, not raised."""
    cmd = cargo_ndk_command(config, target)
    print(f"🛠️  Cross-compiling {target.abi} ({target.triple})...")
    log.debug("running %s", cmd)
    try:
        r = subprocess.run(cmd, cwd=str(config.project_root), env=_build_env(config), check=False)
        if r.returncode != 0:
            raise StageFailed(cmd, r.returncode)
        lib = target.library_path(config.project_root, config.crate_name)
        if not lib.is_file():
            raise MissingArtifactError(lib, f"lib{config.crate_name}.so for {target.triple}")
    except PipelineError as e:
        print(f"❌ {target.abi}: {e}")
        return TargetResult(target=target, error=str(e))

    stripped = False
    if config.strip:
        stripped = strip_library(lib, config.ndk_home)
    print(f"✅ {target.abi}: {lib.relative_to(config.project_root)}")
    return TargetResult(
        target=target,
        artifact=Artifact(lib, SHARED_LIBRARY, target),
        stripped=stripped,
    )


def build_targets(
    config: PipelineConfig,
    targets: tuple[BuildTarget, ...] | list[BuildTarget] | None = None,
) -> list[TargetResult]:
    """Build every target on a pool of config.jobs workers. Raises MissingToolError if cargo-ndk is absent."""
    ensure_cross_tools()
    targets = list(targets if targets is not None else config.targets)
    pending = list(targets)
    results: dict[BuildTarget, TargetResult] = {}
    in_flight: dict[Future, BuildTarget] = {}
    stop = False

    # Submit lazily so at most config.jobs targets are queued or running.
    with ThreadPoolExecutor(max_workers=config.jobs) as pool:
        while pending or in_flight:
            while pending and not stop and len(in_flight) < config.jobs:
                t = pending.pop(0)
                in_flight[pool.submit(build_target, config, t)] = t
            if not in_flight:
                break
            done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
            for fut in done:
                t = in_flight.pop(fut)
                results[t] = fut.result()
                if not results[t].ok and not config.keep_going:
                    stop = True

    for t in pending:
        results[t] = TargetResult(target=t, error=CANCELLED)
    return [results[t] for t in targets]


def failed(results: list[TargetResult]) -> list[TargetResult]:
    return [r for r in results if not r.ok]
