"""Pytest fixtures for Polkabind tooling tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from polkabind_tooling.config import PipelineConfig, resolve_config


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., PipelineConfig]:
    """Factory for a PipelineConfig rooted at tmp_path. Keyword args override defaults."""

    def _make(**values: Any) -> PipelineConfig:
        profile = values.pop("profile", "local")
        return resolve_config(tmp_path, values, profile=profile)

    return _make


@pytest.fixture
def config(make_config: Callable[..., PipelineConfig]) -> PipelineConfig:
    return make_config()


@pytest.fixture
def touch() -> Callable[..., Path]:
    """Write a file (creating parents) and return its path."""

    def _touch(path: Path, content: str | bytes = "x") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content)
        return path

    return _touch
