"""`polkabind` pipeline subcommands: build-host, bindings, cross, assemble, release, publish, metadata."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from polkabind_tooling import pipeline
from polkabind_tooling.assemble.maven import regenerate_metadata
from polkabind_tooling.cli.parse_common import (
    common_parser,
    config_from_args,
    configure_logging,
    path_resolver,
)
from polkabind_tooling.errors import PipelineError
from polkabind_tooling.helpers import normalize_version
from polkabind_tooling.publish import run_publish


def _argv(argv: list[str] | None) -> list[str]:
    if argv is None:
        return sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'polkabind <cmd>'
    return argv


def run_build_host_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind build-host",
        description="Host cargo build and UniFFI metadata probe",
        parents=[common_parser()],
    )
    args = ap.parse_args(_argv(argv))
    sys.exit(pipeline.run_host(config_from_args(args)))


def run_bindings_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind bindings",
        description="Generate Kotlin glue from the host library",
        parents=[common_parser()],
    )
    args = ap.parse_args(_argv(argv))
    sys.exit(pipeline.run_bindings(config_from_args(args)))


def run_cross_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind cross",
        description="Cross-compile for Android ABIs (cargo ndk)",
        parents=[common_parser()],
    )
    ap.add_argument(
        "abis",
        nargs="*",
        help="ABIs to build (arm64-v8a, armeabi-v7a, x86_64, x86 or arm64, armv7). Default: configured targets",
    )
    args = ap.parse_args(_argv(argv))
    config = config_from_args(args, targets=args.abis or None)
    sys.exit(pipeline.run_cross(config))


def run_assemble_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind assemble",
        description="Lay out the module, build the AAR, stage the package, write the registry layout",
        parents=[common_parser()],
    )
    ap.add_argument("--version", dest="release_version", default=None, help="Release version (X.Y.Z)")
    args = ap.parse_args(_argv(argv))
    sys.exit(pipeline.run_assemble(config_from_args(args, version=args.release_version)))


def run_release_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind release",
        description="Run the full pipeline; optionally publish",
        parents=[common_parser()],
    )
    ap.add_argument("--version", dest="release_version", default=None, help="Release version (X.Y.Z)")
    ap.add_argument("--publish", action="store_true", help="Push the package to the distribution repo")
    ap.add_argument("--tag", default=None, help="Tag to create when publishing (default: v<version>)")
    ap.add_argument("--workdir", type=path_resolver, default=None, help="Where to clone the repo")
    args = ap.parse_args(_argv(argv))
    config = config_from_args(args, version=args.release_version)
    tag = None
    if args.publish:
        tag = args.tag or (f"v{config.version}" if config.version else None)
        if not tag:
            print("❌ --publish needs --tag or a release version", file=sys.stderr)
            sys.exit(1)
    sys.exit(pipeline.run_pipeline(config, publish_tag=tag, workdir=args.workdir))


def run_publish_argv(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(
        prog="polkabind publish",
        description="Replace the distribution repo contents with a staged package, commit, tag, push",
        parents=[common_parser()],
    )
    ap.add_argument("--staging", type=path_resolver, default=None, help="Staging dir (default: configured package dir)")
    ap.add_argument("--tag", required=True, help="Tag name, e.g. v1.2.3")
    ap.add_argument("--workdir", type=path_resolver, default=None, help="Where to clone the repo")
    args = ap.parse_args(_argv(argv))
    config = config_from_args(args)
    staging = args.staging or config.package_out_dir
    workdir = args.workdir or Path.cwd()
    sys.exit(run_publish(config, staging, args.tag, workdir))


def run_metadata_argv(argv: list[str] | None = None) -> None:
    """Regenerate maven-metadata.xml for an artifact directory from its version subdirectories."""
    ap = argparse.ArgumentParser(
        prog="polkabind metadata",
        description="Regenerate maven-metadata.xml from version directories on disk",
    )
    ap.add_argument("artifact_dir", type=path_resolver, help="releases/<group>/<artifact>")
    ap.add_argument("--version", dest="release_version", required=True, help="Current version")
    ap.add_argument("--group-id", default=None, help="Default: parent directory name")
    ap.add_argument("--artifact-id", default=None, help="Default: directory name")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(_argv(argv))
    configure_logging(args.verbose)
    try:
        version = normalize_version(args.release_version)
        meta = regenerate_metadata(
            args.artifact_dir,
            args.group_id or args.artifact_dir.parent.name,
            args.artifact_id or args.artifact_dir.name,
            version,
        )
    except (PipelineError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)
    print(f"✅ maven-metadata.xml: latest={meta.latest}, versions={', '.join(meta.versions)}")
    sys.exit(0)
