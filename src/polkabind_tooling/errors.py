"""Pipeline failures. Entry points catch PipelineError, print it, and exit 1."""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base class for fatal pipeline conditions."""


class ConfigError(PipelineError):
    """Invalid or incomplete configuration."""


class MissingToolError(PipelineError):
    """A required executable is not installed or not on PATH."""

    def __init__(self, tool: str, hint: str | None = None) -> None:
        msg = f"{tool} not found"
        if hint:
            msg += f" ({hint})"
        super().__init__(msg)
        self.tool = tool


class MissingArtifactError(PipelineError):
    """An expected file is absent, typically after a delegated build step."""

    def __init__(self, path: Path, what: str | None = None) -> None:
        msg = f"missing {what}: {path}" if what else f"missing {path}"
        super().__init__(msg)
        self.path = path


class IntegrityError(PipelineError):
    """The host library does not export the expected interface metadata."""


class StageFailed(PipelineError):
    """A delegated tool exited non-zero."""

    def __init__(self, cmd: list[str], returncode: int) -> None:
        super().__init__(f"{cmd[0]} exited with status {returncode}")
        self.cmd = cmd
        self.returncode = returncode
