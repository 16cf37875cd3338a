"""Release pipeline: host build -> metadata probe -> bindings -> cross builds -> AAR -> package -> registry -> publish.

Stages run strictly in that order on one thread (cross builds may use the
bounded pool, see build.cross). Any PipelineError aborts the run; run_* entry
points print the diagnostic and return 1.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from polkabind_tooling.assemble import (
    build_aar,
    materialize_module,
    package_release,
    stage_registry,
    write_registry_release,
)
from polkabind_tooling.bindings import expected_glue_path, generate_bindings
from polkabind_tooling.build import build_host, build_targets, verify_host_library
from polkabind_tooling.build.cross import failed
from polkabind_tooling.build.host import host_artifact_paths
from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError, PipelineError
from polkabind_tooling.models import SHARED_LIBRARY, Artifact, TargetResult
from polkabind_tooling.publish import publish

log = logging.getLogger(__name__)


class CrossBuildFailed(PipelineError):
    """One or more targets failed to build."""

    def __init__(self, results: list[TargetResult]) -> None:
        bad = failed(results)
        super().__init__(
            f"{len(bad)} of {len(results)} target(s) failed: "
            + ", ".join(f"{r.target.abi} ({r.error})" for r in bad)
        )
        self.results = results


def report_targets(results: list[TargetResult]) -> None:
    for r in results:
        if r.ok:
            note = "stripped" if r.stripped else "unstripped"
            print(f"  ✅ {r.target.abi:<12} {r.artifact.path.name} ({note})")
        else:
            print(f"  ❌ {r.target.abi:<12} {r.error}", file=sys.stderr)


def cross_stage(config: PipelineConfig) -> list[TargetResult]:
    """Build all targets; raise CrossBuildFailed unless every target succeeded."""
    results = build_targets(config)
    report_targets(results)
    if failed(results):
        raise CrossBuildFailed(results)
    return results


def existing_target_results(config: PipelineConfig) -> list[TargetResult]:
    """Results for previously built per-ABI libraries. Raises MissingArtifactError for any gap."""
    results: list[TargetResult] = []
    for t in config.targets:
        lib = t.library_path(config.project_root, config.crate_name)
        if not lib.is_file():
            raise MissingArtifactError(lib, f"library for {t.abi} (run `polkabind cross` first)")
        results.append(TargetResult(target=t, artifact=Artifact(lib, SHARED_LIBRARY, t)))
    return results


def host_stage(config: PipelineConfig) -> tuple[Artifact, Artifact]:
    library, bindgen = build_host(config)
    verify_host_library(config, library.path)
    return library, bindgen


def bindings_stage(config: PipelineConfig) -> Path:
    """Generate bindings from an existing host build."""
    library, bindgen = host_artifact_paths(config)
    if not library.is_file():
        raise MissingArtifactError(library, "host library (run `polkabind build-host` first)")
    verify_host_library(config, library)
    return generate_bindings(config, library, bindgen)


def assemble_stage(
    config: PipelineConfig,
    glue: Path,
    results: list[TargetResult],
) -> dict[str, Any]:
    layout = materialize_module(config, glue, results)
    aar = build_aar(config, layout)
    staging = package_release(config, layout)
    summary: dict[str, Any] = {"layout": layout, "aar": aar, "staging": staging}
    if config.version:
        summary["metadata"] = write_registry_release(config, aar)
        if config.package_registry:
            stage_registry(config, staging)
    else:
        print("Info:  No release version set; skipping registry layout")
    return summary


def _run_impl(
    config: PipelineConfig,
    publish_tag: str | None = None,
    workdir: Path | None = None,
) -> dict[str, Any]:
    log.debug(
        "profile=%s targets=%s version=%s publish_mode=%s",
        config.profile,
        ",".join(config.abis),
        config.version,
        config.publish_mode,
    )
    library, bindgen = host_stage(config)
    glue = generate_bindings(config, library.path, bindgen.path)
    results = cross_stage(config)
    summary = assemble_stage(config, glue, results)
    summary["targets"] = results
    if publish_tag:
        summary["published"] = publish(
            config,
            summary["staging"],
            publish_tag,
            workdir or config.project_root / "out",
        )
    return summary


def _guard(fn: Callable[[], Any]) -> int:
    try:
        fn()
        return 0
    except PipelineError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1


def run_pipeline(
    config: PipelineConfig,
    publish_tag: str | None = None,
    workdir: Path | None = None,
) -> int:
    """Run every stage; publish when publish_tag is given. Returns 0 or 1."""
    rc = _guard(lambda: _run_impl(config, publish_tag=publish_tag, workdir=workdir))
    if rc == 0:
        print("🎉 Done!")
    return rc


def run_host(config: PipelineConfig) -> int:
    return _guard(lambda: host_stage(config))


def run_bindings(config: PipelineConfig) -> int:
    return _guard(lambda: bindings_stage(config))


def run_cross(config: PipelineConfig) -> int:
    return _guard(lambda: cross_stage(config))


def run_assemble(config: PipelineConfig) -> int:
    """Assemble from existing glue and per-ABI libraries. Returns 0 or 1."""

    def _impl() -> None:
        glue = expected_glue_path(config)
        if not glue.is_file():
            raise MissingArtifactError(glue, "Kotlin glue (run `polkabind bindings` first)")
        assemble_stage(config, glue, existing_target_results(config))

    return _guard(_impl)
