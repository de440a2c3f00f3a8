"""
Pytest configuration and shared fixtures.

Provides real git repositories for the patch queue tests: an `origin`
repository standing in for the remote, an `upstream` clone of it, and
helpers to produce format-patch queues against the upstream.
"""

import os
import subprocess
from pathlib import Path

import pytest

from repatch.core.config import clear_cache

MAIN = "main"
TRACKED = f"origin/{MAIN}"
MIRROR = "upstream"


def git(cwd: Path, *args: str) -> str:
    """Run git in cwd and return stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_files(repo: Path, message: str, files: dict[str, str]) -> str:
    """Write files into repo, commit them, and return the new commit SHA."""
    for name, content in files.items():
        path = repo / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        git(repo, "add", name)
    git(repo, "commit", "-q", "-m", message)
    return git(repo, "rev-parse", "HEAD")


def write_patches(
    upstream: Path,
    patch_dir: Path,
    commits: list[tuple[str, dict[str, str]]],
    scratch: Path,
) -> list[Path]:
    """
    Produce a format-patch queue of commits made on top of upstream's HEAD.

    Args:
        upstream: Repository the patches are based on
        patch_dir: Directory the numbered patch files are written to
        commits: (message, {file: content}) pairs, in order
        scratch: Directory for the temporary clone
    """
    git(scratch.parent, "clone", "-q", str(upstream), scratch.name)
    for message, files in commits:
        commit_files(scratch, message, files)
    patch_dir.mkdir(parents=True, exist_ok=True)
    out = git(scratch, "format-patch", "-o", str(patch_dir), f"HEAD~{len(commits)}")
    return [Path(line) for line in out.splitlines()]


# ==============================================================================
# Environment Fixtures
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path_factory, monkeypatch):
    """Give git a fixed identity and keep user configuration out of tests."""
    home = tmp_path_factory.mktemp("home")
    gitconfig = home / ".gitconfig"
    gitconfig.write_text("")

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    for name in (
        "REPATCH_UPSTREAM_DIR",
        "REPATCH_PATCH_DIR",
        "REPATCH_OUTPUT_DIR",
        "REPATCH_BRANCH",
        "REPATCH_UPSTREAM_BRANCH",
        "REPATCH_VERBOSE",
        "REPATCH_GIT",
    ):
        monkeypatch.delenv(name, raising=False)

    clear_cache()
    yield
    clear_cache()
    # .env loading exports straight into os.environ
    for name in [key for key in os.environ if key.startswith("REPATCH_")]:
        del os.environ[name]


# ==============================================================================
# Repository Fixtures
# ==============================================================================


@pytest.fixture
def origin_repo(tmp_path: Path) -> Path:
    """Repository playing the remote that upstream fetches from."""
    repo = tmp_path / "origin"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "checkout", "-q", "-b", MAIN)
    commit_files(repo, "Initial commit", {"README.md": "# Test Repo\n"})
    return repo


@pytest.fixture
def upstream_repo(tmp_path: Path, origin_repo: Path) -> Path:
    """Upstream repository, a clone of origin_repo."""
    git(tmp_path, "clone", "-q", str(origin_repo), "upstream")
    return tmp_path / "upstream"


@pytest.fixture
def patch_dir(tmp_path: Path) -> Path:
    """Empty patch directory."""
    path = tmp_path / "patches"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output repository path (not created)."""
    return tmp_path / "work"


@pytest.fixture
def clean_patches(tmp_path: Path, upstream_repo: Path, patch_dir: Path) -> list[Path]:
    """Two patches that apply cleanly on upstream."""
    return write_patches(
        upstream_repo,
        patch_dir,
        [
            ("Add a", {"a.txt": "alpha\n"}),
            ("Add b", {"b.txt": "beta\n"}),
        ],
        tmp_path / "scratch",
    )


@pytest.fixture
def conflicting_patches(
    tmp_path: Path, origin_repo: Path, upstream_repo: Path, patch_dir: Path
) -> list[Path]:
    """
    A clean first patch and a second patch that conflicts with upstream.

    The second patch rewrites README.md, which origin then changes as well,
    so the conflict appears once upstream fetches.
    """
    patches = write_patches(
        upstream_repo,
        patch_dir,
        [
            ("Add a", {"a.txt": "alpha\n"}),
            ("Rewrite readme", {"README.md": "# Patched\n"}),
        ],
        tmp_path / "scratch",
    )
    commit_files(origin_repo, "Move upstream", {"README.md": "# Upstream moved\n"})
    return patches
