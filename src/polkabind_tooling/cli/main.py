"""Main CLI entry point for Polkabind tooling."""

import sys

from polkabind_tooling.cli import ci_cmd, pipeline_cmd

COMMANDS = {
    "build-host": pipeline_cmd.run_build_host_argv,
    "bindings": pipeline_cmd.run_bindings_argv,
    "cross": pipeline_cmd.run_cross_argv,
    "assemble": pipeline_cmd.run_assemble_argv,
    "release": pipeline_cmd.run_release_argv,
    "publish": pipeline_cmd.run_publish_argv,
    "metadata": pipeline_cmd.run_metadata_argv,
    "ci": ci_cmd.run_ci_argv,
}


def usage() -> None:
    print("Usage: polkabind <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print("  build-host            - Host cargo build + UniFFI metadata probe", file=sys.stderr)
    print("  bindings              - Generate Kotlin glue with uniffi-bindgen", file=sys.stderr)
    print("  cross [abi ...]       - Cross-compile for Android ABIs (cargo ndk)", file=sys.stderr)
    print(
        "  assemble              - Module layout, AAR, staging package, registry layout",
        file=sys.stderr,
    )
    print("  release [--publish]   - Full pipeline (all of the above, then publish)", file=sys.stderr)
    print("  publish --tag T       - Replace distribution repo contents, commit, tag, push", file=sys.stderr)
    print("  metadata DIR --version V - Regenerate maven-metadata.xml from disk", file=sys.stderr)
    print("  ci tag-version        - Release version from the triggering tag", file=sys.stderr)


def main() -> None:
    """Main CLI entry point."""
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        usage()
        sys.exit(1)

    command = sys.argv[1]
    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)
    handler(sys.argv[2:])


if __name__ == "__main__":
    main()
