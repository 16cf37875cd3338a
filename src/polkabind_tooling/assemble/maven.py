"""Maven-style registry layout for tagged releases.

releases/<group_id>/<artifact_id>/
    maven-metadata.xml
    <version>/<artifact_id>-<version>.aar
    <version>/<artifact_id>-<version>.pom

maven-metadata.xml is regenerated from the version directories on disk, never
from an in-memory list, so a re-run after a partial failure converges on the
same index.
"""

from __future__ import annotations

import shutil
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path

from polkabind_tooling.config import PipelineConfig
from polkabind_tooling.errors import MissingArtifactError
from polkabind_tooling.helpers import SEMVER_RE, compare_versions, sort_versions
from polkabind_tooling.models import ReleaseMetadata

POM_NS = "http://maven.apache.org/POM/4.0.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
POM_SCHEMA = "http://maven.apache.org/POM/4.0.0 https://maven.apache.org/xsd/maven-4.0.0.xsd"
METADATA_FILE = "maven-metadata.xml"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


def artifact_dir(config: PipelineConfig) -> Path:
    return config.releases_dir / config.group_id / config.artifact_id


def _serialize(root: ET.Element) -> bytes:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="UTF-8", xml_declaration=True) + b"\n"


def _sub(parent: ET.Element, tag: str, text: str) -> ET.Element:
    el = ET.SubElement(parent, tag)
    el.text = text
    return el


def render_pom(group_id: str, artifact_id: str, version: str, packaging: str = "aar") -> bytes:
    """Minimal POM naming groupId, artifactId, version, and packaging."""
    ET.register_namespace("", POM_NS)
    ET.register_namespace("xsi", XSI_NS)
    project = ET.Element(f"{{{POM_NS}}}project", {f"{{{XSI_NS}}}schemaLocation": POM_SCHEMA})
    _sub(project, f"{{{POM_NS}}}modelVersion", "4.0.0")
    _sub(project, f"{{{POM_NS}}}groupId", group_id)
    _sub(project, f"{{{POM_NS}}}artifactId", artifact_id)
    _sub(project, f"{{{POM_NS}}}version", version)
    _sub(project, f"{{{POM_NS}}}packaging", packaging)
    return _serialize(project)


def render_metadata(meta: ReleaseMetadata) -> bytes:
    root = ET.Element("metadata")
    _sub(root, "groupId", meta.group_id)
    _sub(root, "artifactId", meta.artifact_id)
    versioning = ET.SubElement(root, "versioning")
    _sub(versioning, "latest", meta.latest)
    _sub(versioning, "release", meta.release)
    versions = ET.SubElement(versioning, "versions")
    for v in meta.versions:
        _sub(versions, "version", v)
    _sub(versioning, "lastUpdated", meta.last_updated)
    return _serialize(root)


def read_metadata(path: Path) -> ReleaseMetadata | None:
    """Parse an existing maven-metadata.xml; None if absent or unparsable."""
    if not path.is_file():
        return None
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError:
        return None
    versioning = root.find("versioning")

    def text(el: ET.Element | None, tag: str) -> str:
        if el is None:
            return ""
        found = el.find(tag)
        return (found.text or "").strip() if found is not None else ""

    return ReleaseMetadata(
        group_id=text(root, "groupId"),
        artifact_id=text(root, "artifactId"),
        version=text(versioning, "release") or text(versioning, "latest"),
        versions=[
            (v.text or "").strip()
            for v in (versioning.findall("versions/version") if versioning is not None else [])
        ],
        last_updated=text(versioning, "lastUpdated"),
    )


def discover_versions(artifact_root: Path) -> list[str]:
    """Version directory names under artifact_root, deduplicated and sorted."""
    if not artifact_root.is_dir():
        return []
    return sort_versions(
        [p.name for p in artifact_root.iterdir() if p.is_dir() and not p.name.startswith(".")]
    )


def regenerate_metadata(
    artifact_root: Path,
    group_id: str,
    artifact_id: str,
    version: str,
    now: datetime | None = None,
) -> ReleaseMetadata:
    """Rewrite artifact_root/maven-metadata.xml from the directory listing.

    latest and release are set to version, which must exist on disk.
    """
    versions = discover_versions(artifact_root)
    if version not in versions:
        raise MissingArtifactError(artifact_root / version, "version directory")
    stamp = (now or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)
    meta = ReleaseMetadata(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        versions=versions,
        last_updated=stamp,
    )
    (artifact_root / METADATA_FILE).write_bytes(render_metadata(meta))
    return meta


def write_registry_release(
    config: PipelineConfig,
    aar: Path,
    now: datetime | None = None,
) -> ReleaseMetadata:
    """Copy the AAR into the versioned layout, write its POM, regenerate the index.

    Requires config.version. latest and release always move to config.version,
    including for a backport older than the previous latest.
    """
    config.require("version")
    version = config.version
    root = artifact_dir(config)
    if not aar.is_file():
        raise MissingArtifactError(aar, "AAR")

    previous = read_metadata(root / METADATA_FILE)
    if (
        previous is not None
        and SEMVER_RE.match(previous.version)
        and compare_versions(version, previous.version) < 0
    ):
        print(f"Info:  {version} is older than the previous latest {previous.version} (backport)")

    print(f"📦 Writing registry layout for {config.artifact_id} {version}...")
    version_dir = root / version
    if version_dir.exists():
        shutil.rmtree(version_dir)
    version_dir.mkdir(parents=True)
    base = f"{config.artifact_id}-{version}"
    shutil.copy2(aar, version_dir / f"{base}.aar")
    (version_dir / f"{base}.pom").write_bytes(
        render_pom(config.group_id, config.artifact_id, version)
    )
    meta = regenerate_metadata(root, config.group_id, config.artifact_id, version, now=now)
    print(f"✅ {METADATA_FILE}: latest={meta.latest}, {len(meta.versions)} version(s)")
    return meta
