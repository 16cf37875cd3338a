"""Bootstrap the Gradle wrapper and build/publish the release AAR."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError, MissingToolError, StageFailed
from polkabind_tooling.helpers import host_system
from polkabind_tooling.models import ModuleLayout

log = logging.getLogger(__name__)

PUBLISH_TASKS = {
    "maven-local": "publishToMavenLocal",
    "github-packages": "publish",
}


def gradlew_path(layout: ModuleLayout, system: str | None = None) -> Path:
    name = "gradlew.bat" if (system or host_system()) == "Windows" else "gradlew"
    return layout.root / name


def gradle_tasks(config: PipelineConfig) -> list[str]:
    return ["clean", "bundleReleaseAar", PUBLISH_TASKS[config.publish_mode]]


def _gradle_env(config: PipelineConfig) -> dict[str, str]:
    env = os.environ.copy()
    if config.gradle_user:
        env["GITHUB_ACTOR"] = config.gradle_user
    if config.gradle_token:
        env["GITHUB_TOKEN"] = config.gradle_token
    return env


def ensure_wrapper(config: PipelineConfig, layout: ModuleLayout) -> Path:
    """Create the Gradle wrapper in the module if missing. Raises MissingToolError or StageFailed."""
    wrapper = gradlew_path(layout)
    if wrapper.is_file():
        return wrapper
    if not shutil.which("gradle"):
        raise MissingToolError("gradle", "needed once to bootstrap the wrapper")
    cmd = [
        "gradle",
        "wrapper",
        "--gradle-version",
        config.gradle_version,
        "--distribution-type",
        "all",
    ]
    print(f"🔧 Bootstrapping Gradle wrapper ({config.gradle_version})...")
    r = subprocess.run(cmd, cwd=str(layout.root), check=False)
    if r.returncode != 0:
        raise StageFailed(cmd, r.returncode)
    if not wrapper.is_file():
        raise MissingArtifactError(wrapper, "Gradle wrapper")
    return wrapper


def find_aar(layout: ModuleLayout) -> Path:
    """The release AAR under build/outputs/aar. Raises MissingArtifactError."""
    out = layout.aar_output_dir
    aars = sorted(out.glob("*.aar")) if out.is_dir() else []
    release = [a for a in aars if "release" in a.name]
    found = release or aars
    if not found:
        raise MissingArtifactError(out, "release AAR")
    return found[0]


def build_aar(config: PipelineConfig, layout: ModuleLayout) -> Path:
    """Run ./gradlew clean bundleReleaseAar <publish task>; return the AAR path."""
    if config.publish_mode == "github-packages":
        config.require("gradle_user", "gradle_token")
    wrapper = ensure_wrapper(config, layout)
    cmd = [str(wrapper), *gradle_tasks(config)]
    print("🔧 Building AAR...")
    log.debug("running %s in %s", cmd, layout.root)
    r = subprocess.run(cmd, cwd=str(layout.root), env=_gradle_env(config), check=False)
    if r.returncode != 0:
        raise StageFailed(cmd, r.returncode)
    aar = find_aar(layout)
    print(f"✅ AAR: {aar.relative_to(config.project_root)}")
    return aar
