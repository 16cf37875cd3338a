"""Lay out the Android library module: Kotlin glue, jniLibs per ABI, Gradle descriptors.

Descriptors are rendered from templates/*.kts.tmpl ({{placeholder}} substitution).
The module directory is deleted and rebuilt on every run.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError
from polkabind_tooling.models import ModuleLayout, TargetResult

TEMPLATES_DIR = Path(__file__).parent / "templates"

SNAPSHOT_VERSION = "1.0.0-SNAPSHOT"


def module_layout(config: PipelineConfig) -> ModuleLayout:
    """out/PolkabindKotlin/<artifact_id> for the configured ABIs."""
    return ModuleLayout(
        root=config.module_out_dir / config.artifact_id,
        namespace=config.namespace,
        abis=config.abis,
    )


def render_template(name: str, values: dict[str, str]) -> str:
    """Read templates/<name> and replace each {{key}} with values[key]."""
    content = (TEMPLATES_DIR / name).read_text()
    for key, value in values.items():
        content = content.replace("{{" + key + "}}", value)
    return content


def publish_repository_block(config: PipelineConfig) -> str:
    """Kotlin DSL for publishing.repositories, selected by publish_mode."""
    if config.publish_mode == "github-packages":
        return "\n".join(
            [
                "      maven {",
                '        name = "GitHubPackages"',
                f'        url = uri("{config.github_packages_url}")',
                "        credentials {",
                '          username = System.getenv("GITHUB_ACTOR")',
                '          password = System.getenv("GITHUB_TOKEN")',
                "        }",
                "      }",
            ]
        )
    return '      maven { url = uri("$rootDir/../maven-snapshots") }'


def descriptor_values(config: PipelineConfig) -> dict[str, str]:
    return {
        "agp_version": config.agp_version,
        "kotlin_version": config.kotlin_version,
        "artifact_id": config.artifact_id,
        "group_id": config.group_id,
        "version": config.version or SNAPSHOT_VERSION,
        "namespace": config.namespace,
        "compile_sdk": str(config.compile_sdk),
        "min_sdk": str(config.min_sdk),
        "abi_filters": ", ".join(f'"{abi}"' for abi in config.abis),
        "jna_version": config.jna_version,
        "coroutines_version": config.coroutines_version,
        "jvm_target": config.jvm_target,
        "publish_repository": publish_repository_block(config),
    }


def materialize_module(
    config: PipelineConfig,
    glue: Path,
    results: list[TargetResult],
) -> ModuleLayout:
    """Write the module tree to disk and return its layout. Raises MissingArtifactError."""
    layout = module_layout(config)
    print("📂 Setting up Android library module...")
    if layout.root.exists():
        shutil.rmtree(layout.root)

    if not glue.is_file():
        raise MissingArtifactError(glue, "Kotlin glue source")
    by_abi = {r.target.abi: r for r in results if r.ok}

    layout.source_dir.mkdir(parents=True)
    shutil.copy2(glue, layout.source_dir / glue.name)

    for abi in layout.abis:
        result = by_abi.get(abi)
        if result is None or result.artifact is None:
            raise MissingArtifactError(layout.abi_dir(abi), f"native library for {abi}")
        dest = layout.abi_dir(abi)
        dest.mkdir(parents=True)
        shutil.copy2(result.artifact.path, dest / result.artifact.path.name)

    values = descriptor_values(config)
    layout.settings_file.write_text(render_template("settings.gradle.kts.tmpl", values))
    layout.build_file.write_text(render_template("build.gradle.kts.tmpl", values))
    print(f"✅ Module ready: {layout.root.relative_to(config.project_root)}")
    return layout
