"""CI helpers: release version from the triggering tag."""

from .tag_version import run as run_tag_version
from .tag_version import version_from_ref

__all__ = ["run_tag_version", "version_from_ref"]
