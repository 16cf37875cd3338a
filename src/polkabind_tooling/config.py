"""Pipeline configuration: defaults, profiles, polkabind.yaml, and environment overlay.

Resolution order (later wins):
- DEFAULT_CONFIG
- built-in profile (BUILTIN_PROFILES[profile])
- top-level keys of polkabind.yaml
- profiles.<profile> section of polkabind.yaml
- environment (NDK path, version tag, credentials, jobs)
- explicit overrides (CLI flags)

Paths are relative to project_root (absolute paths are kept as given). load_config is called once; the resulting
PipelineConfig is passed to every stage.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from polkabind_tooling.errors import ConfigError
from polkabind_tooling.helpers import normalize_version
from polkabind_tooling.models import BuildTarget

CONFIG_FILE_NAME = "polkabind.yaml"

PUBLISH_MODES = ("maven-local", "github-packages")

DEFAULT_CONFIG: dict[str, Any] = {
    "crate_name": "polkabind",
    "group_id": "dev.polkabind",
    "artifact_id": "polkabind-android",
    "namespace": "dev.polkabind",
    "targets": ["arm64-v8a", "armeabi-v7a", "x86_64", "x86"],
    "android_platform": 21,
    "min_sdk": 24,
    "compile_sdk": 35,
    "gradle_version": "8.6",
    "agp_version": "8.4.0",
    "kotlin_version": "1.9.20",
    "jvm_target": "1.8",
    "jna_version": "5.13.0",
    "coroutines_version": "1.6.4",
    "publish_mode": "maven-local",
    "github_packages_url": "https://maven.pkg.github.com/Polkabind/polkabind",
    "uniffi_config": "uniffi.toml",
    "bindings_dir": "bindings/kotlin",
    "module_out_dir": "out/PolkabindKotlin",
    "package_out_dir": "out/polkabind-kotlin-pkg",
    "releases_dir": "releases",
    "license_file": "LICENSE",
    "readme_file": "docs/readmes/kotlin/README.md",
    "metadata_symbol_prefix": "UNIFFI_META_",
    "publish_repo": "Polkabind/polkabind-kotlin-pkg",
    "publish_branch": "main",
    "jobs": 1,
    "keep_going": False,
    "strip": True,
    "package_registry": False,
}

# local: developer machine, all ABIs, Maven local + file repo.
# ci: release workflow, device ABIs only, GitHub Packages, registry shipped in
#     the staging package so the distribution repo keeps every version.
BUILTIN_PROFILES: dict[str, dict[str, Any]] = {
    "local": {},
    "ci": {
        "targets": ["arm64-v8a", "armeabi-v7a"],
        "publish_mode": "github-packages",
        "package_registry": True,
    },
}

NDK_ENV_VARS = ("ANDROID_NDK_HOME", "ANDROID_NDK_ROOT", "NDK_HOME")

_PATH_KEYS = (
    "uniffi_config",
    "bindings_dir",
    "module_out_dir",
    "package_out_dir",
    "releases_dir",
    "license_file",
    "readme_file",
)


@dataclass(frozen=True)
class PipelineConfig:
    project_root: Path
    crate_name: str
    group_id: str
    artifact_id: str
    namespace: str
    targets: tuple[BuildTarget, ...]
    android_platform: int
    min_sdk: int
    compile_sdk: int
    gradle_version: str
    agp_version: str
    kotlin_version: str
    jvm_target: str
    jna_version: str
    coroutines_version: str
    publish_mode: str
    github_packages_url: str
    uniffi_config: Path
    bindings_dir: Path
    module_out_dir: Path
    package_out_dir: Path
    releases_dir: Path
    license_file: Path
    readme_file: Path
    metadata_symbol_prefix: str
    publish_repo: str
    publish_branch: str
    jobs: int = 1
    keep_going: bool = False
    strip: bool = True
    package_registry: bool = False
    profile: str = "local"
    ndk_home: Path | None = None
    version: str | None = None
    gradle_user: str | None = None
    gradle_token: str | None = None
    publish_token: str | None = None

    @property
    def namespace_path(self) -> Path:
        return Path(*self.namespace.split("."))

    @property
    def glue_file_name(self) -> str:
        return f"{self.crate_name}.kt"

    @property
    def abis(self) -> tuple[str, ...]:
        return tuple(t.abi for t in self.targets)

    def require(self, *names: str) -> None:
        """Raise ConfigError naming every listed field that is unset or empty."""
        missing = [n for n in names if not getattr(self, n)]
        if missing:
            msg = "missing required configuration: " + ", ".join(missing)
            raise ConfigError(msg)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        msg = f"Cannot read {path}: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at top level"
        raise ConfigError(msg)
    return data


def _version_from_env(env: Mapping[str, str]) -> str | None:
    explicit = env.get("POLKABIND_VERSION", "").strip()
    if explicit:
        return explicit
    ref_name = env.get("GITHUB_REF_NAME", "").strip()
    is_tag = env.get("GITHUB_REF_TYPE") == "tag" or env.get("GITHUB_REF", "").startswith(
        "refs/tags/"
    )
    if ref_name and is_tag:
        return ref_name
    return None


def _env_overlay(env: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for var in NDK_ENV_VARS:
        if env.get(var):
            out["ndk_home"] = env[var]
            break
    version = _version_from_env(env)
    if version:
        out["version"] = version
    if env.get("GITHUB_ACTOR"):
        out["gradle_user"] = env["GITHUB_ACTOR"]
    if env.get("GITHUB_TOKEN"):
        out["gradle_token"] = env["GITHUB_TOKEN"]
    if env.get("GH_PAT"):
        out["publish_token"] = env["GH_PAT"]
    if env.get("POLKABIND_PUBLISH_REPO"):
        out["publish_repo"] = env["POLKABIND_PUBLISH_REPO"]
    if env.get("POLKABIND_RELEASES_DIR"):
        out["releases_dir"] = env["POLKABIND_RELEASES_DIR"]
    if env.get("POLKABIND_JOBS"):
        out["jobs"] = env["POLKABIND_JOBS"]
    return out


def _parse_targets(names: Any) -> tuple[BuildTarget, ...]:
    if isinstance(names, str):
        names = [n for n in names.replace(",", " ").split() if n]
    elif not isinstance(names, (list, tuple)):
        msg = f"targets: expected a list of ABI names, got {names!r}"
        raise ConfigError(msg)
    if not names:
        msg = "targets: at least one ABI is required"
        raise ConfigError(msg)
    targets: list[BuildTarget] = []
    for name in names:
        try:
            t = BuildTarget.from_name(str(name))
        except ValueError as e:
            raise ConfigError(str(e)) from e
        if t not in targets:
            targets.append(t)
    return tuple(targets)


def _as_int(key: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f"{key}: expected an integer, got {value!r}"
        raise ConfigError(msg) from e


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def resolve_config(
    project_root: Path,
    values: Mapping[str, Any],
    profile: str = "local",
) -> PipelineConfig:
    """Validate merged values and build a PipelineConfig. Raises ConfigError."""
    merged = dict(DEFAULT_CONFIG)
    merged.update({k: v for k, v in values.items() if v is not None})

    publish_mode = str(merged["publish_mode"])
    if publish_mode not in PUBLISH_MODES:
        msg = f"publish_mode: unknown mode {publish_mode!r}. Use one of: {', '.join(PUBLISH_MODES)}"
        raise ConfigError(msg)

    jobs = _as_int("jobs", merged["jobs"])
    if jobs < 1:
        msg = f"jobs: must be at least 1, got {jobs}"
        raise ConfigError(msg)

    version = merged.get("version")
    if version:
        try:
            version = normalize_version(str(version))
        except ValueError as e:
            raise ConfigError(f"version: {e}") from e

    root = Path(project_root).resolve()
    paths = {k: root / str(merged[k]) for k in _PATH_KEYS}
    ndk = merged.get("ndk_home")

    return PipelineConfig(
        project_root=root,
        crate_name=str(merged["crate_name"]),
        group_id=str(merged["group_id"]),
        artifact_id=str(merged["artifact_id"]),
        namespace=str(merged["namespace"]),
        targets=_parse_targets(merged["targets"]),
        android_platform=_as_int("android_platform", merged["android_platform"]),
        min_sdk=_as_int("min_sdk", merged["min_sdk"]),
        compile_sdk=_as_int("compile_sdk", merged["compile_sdk"]),
        gradle_version=str(merged["gradle_version"]),
        agp_version=str(merged["agp_version"]),
        kotlin_version=str(merged["kotlin_version"]),
        jvm_target=str(merged["jvm_target"]),
        jna_version=str(merged["jna_version"]),
        coroutines_version=str(merged["coroutines_version"]),
        publish_mode=publish_mode,
        github_packages_url=str(merged["github_packages_url"]),
        metadata_symbol_prefix=str(merged["metadata_symbol_prefix"]),
        publish_repo=str(merged["publish_repo"]),
        publish_branch=str(merged["publish_branch"]),
        jobs=jobs,
        keep_going=_as_bool(merged["keep_going"]),
        strip=_as_bool(merged["strip"]),
        package_registry=_as_bool(merged["package_registry"]),
        profile=profile,
        ndk_home=Path(ndk) if ndk else None,
        version=version or None,
        gradle_user=merged.get("gradle_user"),
        gradle_token=merged.get("gradle_token"),
        publish_token=merged.get("publish_token"),
        **paths,
    )


def load_config(
    project_root: Path,
    config_path: Path | None = None,
    profile: str | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> PipelineConfig:
    """Load polkabind.yaml (if present), apply profile, environment, and overrides. Raises ConfigError."""
    if env is None:
        env = os.environ
    root = Path(project_root)
    profile = profile or env.get("POLKABIND_PROFILE") or "local"

    data: dict[str, Any] = {}
    path = config_path or root / CONFIG_FILE_NAME
    if config_path is not None and not config_path.is_file():
        msg = f"Config file not found: {config_path}"
        raise ConfigError(msg)
    if path.is_file():
        data = _read_yaml(path)
    file_profiles = data.pop("profiles", None) or {}
    if not isinstance(file_profiles, dict):
        msg = f"{path}: profiles must be a mapping"
        raise ConfigError(msg)

    if profile not in BUILTIN_PROFILES and profile not in file_profiles:
        known = sorted(set(BUILTIN_PROFILES) | set(file_profiles))
        msg = f"Unknown profile {profile!r}. Known profiles: {', '.join(known)}"
        raise ConfigError(msg)

    values: dict[str, Any] = {}
    values.update(BUILTIN_PROFILES.get(profile, {}))
    values.update(data)
    values.update(file_profiles.get(profile) or {})
    values.update(_env_overlay(env))
    if overrides:
        values.update({k: v for k, v in overrides.items() if v is not None})
    return resolve_config(root, values, profile=profile)
