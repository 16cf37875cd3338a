"""Bundle the distributable Kotlin package: LICENSE, README, aar/, src/ (and optionally releases/)."""

from __future__ import annotations

import shutil
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError
from polkabind_tooling.helpers import reset_dir
from polkabind_tooling.models import ModuleLayout


def package_release(config: PipelineConfig, layout: ModuleLayout) -> Path:
    """Recreate package_out_dir from the built module. Returns the staging directory.

    Raises MissingArtifactError if LICENSE, README, AAR outputs, or sources are absent.
    """
    for path, what in (
        (config.license_file, "LICENSE"),
        (config.readme_file, "Kotlin README"),
        (layout.aar_output_dir, "AAR outputs"),
        (layout.source_dir, "module sources"),
    ):
        if not path.exists():
            raise MissingArtifactError(path, what)

    print("🚚 Bundling Kotlin package...")
    out = reset_dir(config.package_out_dir)
    shutil.copy2(config.license_file, out / config.license_file.name)
    shutil.copy2(config.readme_file, out / config.readme_file.name)
    shutil.copytree(layout.aar_output_dir, out / "aar")
    shutil.copytree(layout.source_dir, out / "src")
    print(f"✅ Kotlin package: {out.relative_to(config.project_root)}")
    return out


def stage_registry(config: PipelineConfig, staging: Path) -> Path:
    """Copy the artifact's registry tree into staging/releases/<group>/<artifact>.

    Publishing replaces the distribution repo contents, so the registry has to
    travel in the staging package to keep earlier versions.
    """
    src = config.releases_dir / config.group_id / config.artifact_id
    if not src.is_dir():
        raise MissingArtifactError(src, "registry layout")
    dest = staging / "releases" / config.group_id / config.artifact_id
    if dest.exists():
        shutil.rmtree(dest)
    shutil.copytree(src, dest)
    print(f"✅ Registry staged: {dest.relative_to(staging)}")
    return dest
