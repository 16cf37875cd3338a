"""Build targets, artifacts, per-target results, module layout, and release metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# Android ABI -> Rust target triple (cargo ndk --target).
ABI_TARGETS: dict[str, str] = {
    "arm64-v8a": "aarch64-linux-android",
    "armeabi-v7a": "armv7-linux-androideabi",
    "x86_64": "x86_64-linux-android",
    "x86": "i686-linux-android",
}

ABI_ALIASES: dict[str, str] = {
    "arm64": "arm64-v8a",
    "aarch64": "arm64-v8a",
    "armv7": "armeabi-v7a",
    "arm7": "armeabi-v7a",
    "x64": "x86_64",
    "i686": "x86",
}

SHARED_LIBRARY = "shared-library"
EXECUTABLE = "executable"


@dataclass(frozen=True)
class BuildTarget:
    """One cross-compilation destination: Android ABI and Rust triple."""

    abi: str
    triple: str

    @classmethod
    def from_name(cls, name: str) -> BuildTarget:
        """Resolve an ABI name or alias (arm64, armv7, ...). Raises ValueError for unknown names."""
        abi = ABI_ALIASES.get(name, name)
        if abi not in ABI_TARGETS:
            msg = f"Unknown ABI: {name}. Use one of: {', '.join(ABI_TARGETS)}"
            raise ValueError(msg)
        return cls(abi=abi, triple=ABI_TARGETS[abi])

    def library_path(self, project_root: Path, crate: str) -> Path:
        return project_root / "target" / self.triple / "release" / f"lib{crate}.so"


@dataclass(frozen=True)
class Artifact:
    """A produced binary. target is None for host artifacts."""

    path: Path
    kind: str = SHARED_LIBRARY
    target: BuildTarget | None = None

    @property
    def is_host(self) -> bool:
        return self.target is None


@dataclass
class TargetResult:
    """Outcome of building one BuildTarget."""

    target: BuildTarget
    artifact: Artifact | None = None
    error: str | None = None
    stripped: bool = False

    @property
    def ok(self) -> bool:
        return self.artifact is not None and self.error is None


@dataclass(frozen=True)
class ModuleLayout:
    """Directory tree of the Android library module handed to Gradle."""

    root: Path
    namespace: str
    abis: tuple[str, ...]

    @property
    def source_dir(self) -> Path:
        return self.root / "src" / "main" / "java" / Path(*self.namespace.split("."))

    @property
    def jni_libs_dir(self) -> Path:
        return self.root / "src" / "main" / "jniLibs"

    def abi_dir(self, abi: str) -> Path:
        return self.jni_libs_dir / abi

    @property
    def settings_file(self) -> Path:
        return self.root / "settings.gradle.kts"

    @property
    def build_file(self) -> Path:
        return self.root / "build.gradle.kts"

    @property
    def aar_output_dir(self) -> Path:
        return self.root / "build" / "outputs" / "aar"


@dataclass
class ReleaseMetadata:
    """Contents of a maven-metadata.xml version index."""

    group_id: str
    artifact_id: str
    version: str
    versions: list[str] = field(default_factory=list)
    last_updated: str = ""

    @property
    def latest(self) -> str:
        return self.version

    @property
    def release(self) -> str:
        return self.version

    def is_consistent(self) -> bool:
        """The current version is listed exactly once and nothing is duplicated."""
        return self.versions.count(self.version) == 1 and len(set(self.versions)) == len(
            self.versions
        )
