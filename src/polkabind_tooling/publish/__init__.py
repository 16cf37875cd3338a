"""Publish the staged Kotlin package to the distribution repository."""

from .git_repo import clear_worktree, publish
from .git_repo import run as run_publish

__all__ = ["clear_worktree", "publish", "run_publish"]
