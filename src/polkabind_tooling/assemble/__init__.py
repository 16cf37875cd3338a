"""Assemble the Android library module, build the AAR, stage the package, write the registry layout."""

from .gradle import build_aar, find_aar
from .maven import regenerate_metadata, write_registry_release
from .module import materialize_module, module_layout
from .package import package_release, stage_registry

__all__ = [
    "build_aar",
    "find_aar",
    "materialize_module",
    "module_layout",
    "package_release",
    "regenerate_metadata",
    "stage_registry",
    "write_registry_release",
]
