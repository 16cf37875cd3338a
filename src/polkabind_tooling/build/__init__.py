"""Native builds: host workspace (metadata probe) and per-ABI cross-compilation with best-effort strip."""

from .cross import build_target, build_targets, cargo_ndk_command
from .host import build_host, probe_metadata_symbols, verify_host_library
from .strip import find_strip_tool, strip_library

__all__ = [
    "build_host",
    "build_target",
    "build_targets",
    "cargo_ndk_command",
    "find_strip_tool",
    "probe_metadata_symbols",
    "strip_library",
    "verify_host_library",
]
