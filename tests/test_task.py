"""
Tests for building and running the engine from configuration.
"""

import io
from pathlib import Path

import pytest
from rich.console import Console

from repatch.core.config import RepatchConfig
from repatch.core.errors import ConfigurationError, PatchApplyFailure
from repatch.core.marker import MARKER_NAME
from repatch.core.task import apply_patches, create_engine, validate_config

from conftest import MIRROR, TRACKED, git


def quiet() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def config(upstream_repo: Path, patch_dir: Path, output_dir: Path) -> RepatchConfig:
    return RepatchConfig(
        upstream_dir=upstream_repo,
        patch_dir=patch_dir,
        output_dir=output_dir,
        branch=TRACKED,
        upstream_branch=MIRROR,
    )


class TestValidateConfig:
    def test_valid(self, config: RepatchConfig) -> None:
        validate_config(config)

    def test_missing_upstream(self, config: RepatchConfig, tmp_path: Path) -> None:
        config.upstream_dir = tmp_path / "nowhere"
        with pytest.raises(ConfigurationError, match="Upstream directory does not exist"):
            validate_config(config)

    def test_upstream_not_a_repository(self, config: RepatchConfig, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()
        config.upstream_dir = plain
        with pytest.raises(ConfigurationError, match="not a git repository"):
            validate_config(config)

    def test_missing_patch_dir(self, config: RepatchConfig, tmp_path: Path) -> None:
        config.patch_dir = tmp_path / "no-patches"
        with pytest.raises(ConfigurationError, match="Patch directory does not exist"):
            validate_config(config)

    def test_output_equals_upstream(self, config: RepatchConfig) -> None:
        config.output_dir = config.upstream_dir
        with pytest.raises(ConfigurationError, match="must differ"):
            validate_config(config)


class TestCreateEngine:
    def test_engine_uses_config(self, config: RepatchConfig) -> None:
        config.verbose = True
        config.rebuild_command = "./scripts/rebuild"

        engine = create_engine(config, console=quiet(), error_console=quiet())

        assert engine.upstream.path == config.upstream_dir
        assert engine.upstream.branch == TRACKED
        assert engine.upstream.upstream_branch == MIRROR
        assert engine.output.path == config.output_dir
        assert engine.output.branch == "master"
        assert engine.patch_dir == config.patch_dir
        assert engine.verbose is True
        assert engine.rebuild_command == "./scripts/rebuild"


class TestApplyPatches:
    def test_clean_run(self, config: RepatchConfig, clean_patches) -> None:
        result = apply_patches(config, console=quiet(), error_console=quiet())

        assert result.success
        assert result.cloned
        assert result.patches == ["0001-Add-a.patch", "0002-Add-b.patch"]
        assert "2 patches applied" in result.summary()
        assert git(config.output_dir, "log", "-1", "--format=%s") == "Add b"

    def test_conflict_raises(self, config: RepatchConfig, conflicting_patches) -> None:
        errors = quiet()

        with pytest.raises(PatchApplyFailure) as exc_info:
            apply_patches(config, console=quiet(), error_console=errors)

        assert exc_info.value.marker_path == config.output_dir / ".git" / MARKER_NAME
        assert [p.name for p in exc_info.value.patches] == [
            "0001-Add-a.patch",
            "0002-Rewrite-readme.patch",
        ]
        assert "git format-patch" in errors.file.getvalue()

    def test_invalid_config_runs_nothing(self, config: RepatchConfig, tmp_path: Path) -> None:
        config.patch_dir = tmp_path / "no-patches"

        with pytest.raises(ConfigurationError):
            apply_patches(config, console=quiet(), error_console=quiet())

        assert not config.output_dir.exists()
