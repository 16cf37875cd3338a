"""Generate Kotlin glue with uniffi-bindgen from the host library's embedded metadata."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError, MissingToolError, StageFailed
from polkabind_tooling.helpers import reset_dir

log = logging.getLogger(__name__)


def bindgen_command(
    config: PipelineConfig,
    bindgen: Path,
    library: Path,
    language: str = "kotlin",
) -> list[str]:
    return [
        str(bindgen),
        "generate",
        "--config",
        str(config.uniffi_config),
        "--no-format",
        "--library",
        str(library),
        "--language",
        language,
        "--out-dir",
        str(config.bindings_dir),
    ]


def expected_glue_path(config: PipelineConfig) -> Path:
    """bindings/kotlin/<namespace path>/<crate>.kt"""
    return config.bindings_dir / config.namespace_path / config.glue_file_name


def generate_bindings(config: PipelineConfig, library: Path, bindgen: Path) -> Path:
    """Clear bindings_dir, run uniffi-bindgen once, and return the generated glue file.

    Raises MissingToolError, MissingArtifactError, or StageFailed. Generator
    failures are configuration errors and are never retried.
    """
    if not bindgen.is_file():
        raise MissingToolError(str(bindgen), "run the host build first")
    if not config.uniffi_config.is_file():
        raise MissingArtifactError(config.uniffi_config, "UniFFI config")

    print("🧹 Generating Kotlin bindings...")
    reset_dir(config.bindings_dir)
    cmd = bindgen_command(config, bindgen, library)
    log.debug("running %s", cmd)
    r = subprocess.run(cmd, cwd=str(config.project_root), check=False)
    if r.returncode != 0:
        raise StageFailed(cmd, r.returncode)

    glue = expected_glue_path(config)
    if not glue.is_file():
        raise MissingArtifactError(glue, f"generated Kotlin glue {config.glue_file_name}")
    print(f"✅ Kotlin glue: {glue.relative_to(config.project_root)}")
    return glue
