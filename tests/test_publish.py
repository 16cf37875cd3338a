"""Tests for polkabind_tooling.publish.git_repo."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from polkabind_tooling.errors import ConfigError, StageFailed
from polkabind_tooling.publish import clear_worktree, publish, run_publish
from polkabind_tooling.publish.git_repo import commit_and_tag, remote_url

TOKEN = "ghp_secret123"


@pytest.fixture
def staging(tmp_path: Path, touch) -> Path:
    out = tmp_path / "pkg"
    touch(out / "LICENSE", "Apache-2.0\n")
    touch(out / "README.md", "# Polkabind\n")
    touch(out / "aar" / "polkabind-android-release.aar", b"PK")
    touch(out / "src" / "polkabind.kt", "package dev.polkabind\n")
    return out


def _remote_checkout(repo: Path, touch) -> Path:
    """What a clone of the distribution repo contains: history, workflows, last release."""
    touch(repo / ".git" / "HEAD", "ref: refs/heads/main\n")
    touch(repo / ".github" / "workflows" / "ci.yml")
    touch(repo / "old.txt")
    touch(repo / "aar" / "old.aar")
    return repo


@pytest.fixture
def clone(tmp_path: Path, touch) -> Path:
    return _remote_checkout(tmp_path / "work" / "target-repo", touch)


def _fake_git(touch, commit_output: str | None = None, commit_rc: int = 0):
    """subprocess.run stand-in for git. clone lays down the remote contents."""
    calls: list[list[str]] = []
    envs: list[dict] = []

    def _run(cmd, **kwargs):
        calls.append(cmd)
        envs.append(kwargs.get("env") or {})
        if cmd[1] == "clone":
            dest = Path(cmd[3])
            if dest.exists():
                return MagicMock(returncode=128, stdout="", stderr="destination path exists")
            _remote_checkout(dest, touch)
        if cmd[1] == "commit":
            return MagicMock(returncode=commit_rc, stdout=commit_output or "", stderr="")
        return MagicMock(returncode=0, stdout="", stderr="")

    return _run, calls, envs


class TestClearWorktree:
    def test_preserves_git_and_github(self, clone: Path) -> None:
        removed = clear_worktree(clone)
        assert removed == ["aar", "old.txt"]
        assert sorted(p.name for p in clone.iterdir()) == [".git", ".github"]
        assert (clone / ".github" / "workflows" / "ci.yml").is_file()


class TestPublish:
    def test_replaces_contents_and_tags(self, make_config, staging, tmp_path, touch) -> None:
        config = make_config(publish_token=TOKEN)
        fake, calls, _ = _fake_git(touch)
        with (
            patch("shutil.which", return_value="/usr/bin/git"),
            patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=fake),
        ):
            assert publish(config, staging, "v1.2.3", tmp_path / "work") is True

        repo = tmp_path / "work" / "target-repo"
        assert sorted(p.name for p in repo.iterdir()) == [
            ".git",
            ".github",
            "LICENSE",
            "README.md",
            "aar",
            "src",
        ]
        assert not (repo / "aar" / "old.aar").exists()
        assert calls[0][:2] == ["git", "clone"]
        assert calls[0][2] == remote_url("Polkabind/polkabind-kotlin-pkg", TOKEN)
        assert ["git", "commit", "-m", "Release v1.2.3"] in calls
        assert ["git", "tag", "v1.2.3"] in calls
        assert calls[-1] == ["git", "push", "origin", "refs/tags/v1.2.3"]

    def test_rerun_discards_clone_from_interrupted_run(
        self, make_config, staging, clone, tmp_path, touch
    ) -> None:
        # Earlier run tagged locally, then failed to push.
        local_tag = touch(clone / ".git" / "refs" / "tags" / "v1.2.3", "deadbeef\n")
        half_copied = touch(clone / "README.md", "partial\n")
        config = make_config(publish_token=TOKEN)
        fake, calls, _ = _fake_git(touch)
        with (
            patch("shutil.which", return_value="/usr/bin/git"),
            patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=fake),
        ):
            assert publish(config, staging, "v1.2.3", tmp_path / "work") is True
        assert calls[0][:2] == ["git", "clone"]
        assert not local_tag.exists()
        assert half_copied.read_text() == "# Polkabind\n"
        assert calls[-1] == ["git", "push", "origin", "refs/tags/v1.2.3"]

    def test_nothing_to_commit_still_tags(self, make_config, staging, tmp_path, touch, capsys) -> None:
        config = make_config(publish_token=TOKEN)
        fake, calls, _ = _fake_git(touch, "nothing to commit, working tree clean", commit_rc=1)
        with (
            patch("shutil.which", return_value="/usr/bin/git"),
            patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=fake),
        ):
            assert publish(config, staging, "v1.2.3", tmp_path / "work") is False
        assert "Nothing to commit" in capsys.readouterr().out
        assert ["git", "tag", "v1.2.3"] in calls

    def test_git_runs_untranslated(self, make_config, staging, tmp_path, touch, monkeypatch) -> None:
        monkeypatch.setenv("LC_ALL", "de_DE.UTF-8")
        monkeypatch.setenv("LANG", "de_DE.UTF-8")
        config = make_config(publish_token=TOKEN)
        fake, calls, envs = _fake_git(touch)
        with (
            patch("shutil.which", return_value="/usr/bin/git"),
            patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=fake),
        ):
            publish(config, staging, "v1.2.3", tmp_path / "work")
        assert envs
        assert all(env.get("LC_ALL") == "C" for env in envs)

    def test_requires_token(self, config, staging, tmp_path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            publish(config, staging, "v1.2.3", tmp_path / "work")
        assert "publish_token" in str(exc_info.value)


class TestCommitAndTag:
    def test_commit_failure_redacts_token(self, make_config, clone, capsys) -> None:
        config = make_config(publish_token=TOKEN)

        def _run(cmd, **kwargs):
            if cmd[1] == "commit":
                return MagicMock(returncode=128, stdout="", stderr=f"fatal: bad {TOKEN}")
            return MagicMock(returncode=0, stdout="", stderr="")

        with patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=_run):
            with pytest.raises(StageFailed):
                commit_and_tag(config, clone, "v1.2.3")
        err = capsys.readouterr().err
        assert TOKEN not in err
        assert "***" in err

    def test_push_failure_stops_before_tag(self, make_config, clone) -> None:
        config = make_config(publish_token=TOKEN)
        calls = []

        def _run(cmd, **kwargs):
            calls.append(cmd)
            rc = 1 if cmd[1] == "push" else 0
            return MagicMock(returncode=rc, stdout="", stderr="rejected")

        with patch("polkabind_tooling.publish.git_repo.subprocess.run", side_effect=_run):
            with pytest.raises(StageFailed):
                commit_and_tag(config, clone, "v1.2.3")
        assert ["git", "tag", "v1.2.3"] not in calls


class TestRun:
    def test_returns_one_on_error(self, config, staging, tmp_path) -> None:
        assert run_publish(config, staging, "v1.2.3", tmp_path / "work") == 1
