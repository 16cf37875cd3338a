"""Tests for polkabind_tooling.pipeline (stage ordering and abort behaviour)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from polkabind_tooling import pipeline
from polkabind_tooling.errors import IntegrityError, StageFailed
from polkabind_tooling.models import Artifact, BuildTarget, TargetResult


def _ok(abi: str, root: Path) -> TargetResult:
    t = BuildTarget.from_name(abi)
    return TargetResult(target=t, artifact=Artifact(t.library_path(root, "polkabind"), target=t))


@pytest.fixture
def host_artifacts(tmp_path: Path) -> tuple[Artifact, Artifact]:
    return Artifact(tmp_path / "libpolkabind.so"), Artifact(tmp_path / "uniffi-bindgen")


class TestRunPipeline:
    def test_failed_probe_aborts_before_cross_builds(self, config, host_artifacts, capsys) -> None:
        with (
            patch("polkabind_tooling.pipeline.build_host", return_value=host_artifacts),
            patch(
                "polkabind_tooling.pipeline.verify_host_library",
                side_effect=IntegrityError("no UNIFFI_META_ symbols"),
            ),
            patch("polkabind_tooling.pipeline.generate_bindings") as m_gen,
            patch("polkabind_tooling.pipeline.build_targets") as m_cross,
        ):
            assert pipeline.run_pipeline(config) == 1
        m_gen.assert_not_called()
        m_cross.assert_not_called()
        assert "UNIFFI_META_" in capsys.readouterr().err

    def test_failed_target_aborts_before_assembly(self, config, host_artifacts, tmp_path) -> None:
        results = [
            _ok("arm64", tmp_path),
            TargetResult(target=BuildTarget.from_name("armv7"), error="cargo exited with status 101"),
        ]
        with (
            patch("polkabind_tooling.pipeline.build_host", return_value=host_artifacts),
            patch("polkabind_tooling.pipeline.verify_host_library"),
            patch("polkabind_tooling.pipeline.generate_bindings", return_value=tmp_path / "polkabind.kt"),
            patch("polkabind_tooling.pipeline.build_targets", return_value=results),
            patch("polkabind_tooling.pipeline.materialize_module") as m_module,
        ):
            assert pipeline.run_pipeline(config) == 1
        m_module.assert_not_called()

    def test_stages_run_in_order_and_publish(self, make_config, host_artifacts, tmp_path) -> None:
        config = make_config(version="1.2.3", targets=["arm64"])
        order: list[str] = []

        def step(name, value=None):
            def _f(*args, **kwargs):
                order.append(name)
                return value

            return _f

        with (
            patch("polkabind_tooling.pipeline.build_host", side_effect=step("host", host_artifacts)),
            patch("polkabind_tooling.pipeline.verify_host_library", side_effect=step("probe")),
            patch(
                "polkabind_tooling.pipeline.generate_bindings",
                side_effect=step("bindings", tmp_path / "polkabind.kt"),
            ),
            patch(
                "polkabind_tooling.pipeline.build_targets",
                side_effect=step("cross", [_ok("arm64", tmp_path)]),
            ),
            patch("polkabind_tooling.pipeline.materialize_module", side_effect=step("module")),
            patch("polkabind_tooling.pipeline.build_aar", side_effect=step("aar", tmp_path / "a.aar")),
            patch("polkabind_tooling.pipeline.package_release", side_effect=step("package", tmp_path / "pkg")),
            patch("polkabind_tooling.pipeline.write_registry_release", side_effect=step("registry")),
            patch("polkabind_tooling.pipeline.publish", side_effect=step("publish", True)) as m_pub,
        ):
            assert pipeline.run_pipeline(config, publish_tag="v1.2.3") == 0
        assert order == [
            "host",
            "probe",
            "bindings",
            "cross",
            "module",
            "aar",
            "package",
            "registry",
            "publish",
        ]
        assert m_pub.call_args[0][1:3] == (tmp_path / "pkg", "v1.2.3")

    def test_no_version_skips_registry(self, config, tmp_path, capsys) -> None:
        with (
            patch("polkabind_tooling.pipeline.materialize_module"),
            patch("polkabind_tooling.pipeline.build_aar", return_value=tmp_path / "a.aar"),
            patch("polkabind_tooling.pipeline.package_release", return_value=tmp_path / "pkg"),
            patch("polkabind_tooling.pipeline.write_registry_release") as m_reg,
        ):
            summary = pipeline.assemble_stage(config, tmp_path / "polkabind.kt", [])
        m_reg.assert_not_called()
        assert "metadata" not in summary
        assert "skipping registry" in capsys.readouterr().out

    @pytest.mark.parametrize("package_registry", [True, False])
    def test_registry_staged_into_package(self, make_config, tmp_path, package_registry) -> None:
        config = make_config(version="1.2.3", package_registry=package_registry)
        with (
            patch("polkabind_tooling.pipeline.materialize_module"),
            patch("polkabind_tooling.pipeline.build_aar", return_value=tmp_path / "a.aar"),
            patch("polkabind_tooling.pipeline.package_release", return_value=tmp_path / "pkg"),
            patch("polkabind_tooling.pipeline.write_registry_release"),
            patch("polkabind_tooling.pipeline.stage_registry") as m_stage,
        ):
            pipeline.assemble_stage(config, tmp_path / "polkabind.kt", [])
        if package_registry:
            m_stage.assert_called_once_with(config, tmp_path / "pkg")
        else:
            m_stage.assert_not_called()


class TestStageEntryPoints:
    def test_run_host_reports_stage_failure(self, config, capsys) -> None:
        with patch(
            "polkabind_tooling.pipeline.build_host",
            side_effect=StageFailed(["cargo", "build"], 101),
        ):
            assert pipeline.run_host(config) == 1
        assert "cargo exited with status 101" in capsys.readouterr().err

    def test_run_bindings_needs_host_build(self, config, capsys) -> None:
        assert pipeline.run_bindings(config) == 1
        assert "build-host" in capsys.readouterr().err

    def test_run_assemble_needs_glue(self, config, capsys) -> None:
        assert pipeline.run_assemble(config) == 1
        assert "polkabind bindings" in capsys.readouterr().err

    def test_run_assemble_needs_every_abi(self, make_config, touch, capsys) -> None:
        config = make_config(targets=["arm64", "armv7"])
        touch(config.bindings_dir / "dev" / "polkabind" / "polkabind.kt")
        touch(BuildTarget.from_name("arm64").library_path(config.project_root, "polkabind"))
        assert pipeline.run_assemble(config) == 1
        assert "armeabi-v7a" in capsys.readouterr().err

    def test_run_cross_success(self, config, tmp_path) -> None:
        with patch(
            "polkabind_tooling.pipeline.build_targets",
            return_value=[_ok("arm64", tmp_path)],
        ):
            assert pipeline.run_cross(config) == 0


def test_cross_build_failed_message() -> None:
    bad = TargetResult(target=BuildTarget.from_name("x86"), error="boom")
    err = pipeline.CrossBuildFailed([bad, MagicMock(ok=True)])
    assert "1 of 2 target(s) failed" in str(err)
    assert "x86 (boom)" in str(err)
