"""Tests for the git repository handle."""

import io
from pathlib import Path

import pytest

from repatch.core.git import Repository
from repatch.core.output import OutputPolicy, OutputRouter

from conftest import git


class Recorder:
    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.calls = []

    def __call__(self, working_dir, argv, stdout=None, stderr=None) -> int:
        self.calls.append((Path(working_dir), list(argv), stdout, stderr))
        return self.exit_code

    @property
    def argv(self) -> list[str]:
        return self.calls[-1][1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def repo(tmp_path: Path, recorder: Recorder) -> Repository:
    return Repository(tmp_path, runner=recorder)


class TestCommands:
    @pytest.mark.parametrize(
        ("invoke", "expected"),
        [
            (lambda r: r.fetch(), ["fetch"]),
            (lambda r: r.fetch("upstream"), ["fetch", "upstream"]),
            (lambda r: r.force_branch("upstream", "main"), ["branch", "-f", "upstream", "main"]),
            (lambda r: r.remove_remote("upstream"), ["remote", "rm", "upstream"]),
            (
                lambda r: r.add_remote("upstream", "/src"),
                ["remote", "add", "upstream", "/src"],
            ),
            (lambda r: r.checkout("master"), ["checkout", "master"]),
            (lambda r: r.checkout("master", create=True), ["checkout", "-b", "master"]),
            (lambda r: r.reset_hard("upstream/upstream"), ["reset", "--hard", "upstream/upstream"]),
            (lambda r: r.abort_am(), ["am", "--abort"]),
        ],
    )
    def test_argv(self, repo: Repository, recorder: Recorder, invoke, expected) -> None:
        invoke(repo)
        assert recorder.argv == ["git", *expected]
        assert recorder.calls[-1][0] == repo.path

    def test_clone(self, repo: Repository, recorder: Recorder) -> None:
        repo.clone(Path("/srv/upstream"), "work")
        assert recorder.argv == ["git", "clone", str(Path("/srv/upstream")), "work"]

    def test_apply_mailbox_single_call(self, repo: Repository, recorder: Recorder) -> None:
        repo.apply_mailbox([Path("a.patch"), Path("b.patch")])

        assert len(recorder.calls) == 1
        argv = recorder.argv
        assert argv[:4] == ["git", "am", "--3way", "--ignore-whitespace"]
        assert argv[4:] == [str(Path("a.patch").absolute()), str(Path("b.patch").absolute())]

    def test_custom_executable(self, tmp_path: Path, recorder: Recorder) -> None:
        Repository(tmp_path, runner=recorder, git_executable="/opt/git/bin/git").fetch()
        assert recorder.argv[0] == "/opt/git/bin/git"

    def test_exit_code_and_last_command(self, tmp_path: Path) -> None:
        repo = Repository(tmp_path, runner=Recorder(exit_code=5))

        assert repo.reset_hard("HEAD") == 5
        assert repo.last_command == ["git", "reset", "--hard", "HEAD"]

    def test_policy_selects_sinks(self, tmp_path: Path, recorder: Recorder) -> None:
        out, err = io.StringIO(), io.StringIO()
        router = OutputRouter(verbose=False, stdout=out, stderr=err)
        repo = Repository(tmp_path, runner=recorder, router=router)

        repo.apply_mailbox([], policy=OutputPolicy.ERRORS_ONLY)
        repo.fetch(policy=OutputPolicy.SEPARATE_STREAMS)

        assert recorder.calls[0][2:] == (None, err)
        assert recorder.calls[1][2:] == (None, None)


class TestMetadata:
    def test_is_repository(self, tmp_path: Path) -> None:
        repo = Repository(tmp_path / "work")
        assert not repo.is_repository()

        (tmp_path / "work").mkdir()
        assert not repo.is_repository()

        (tmp_path / "work" / ".git").mkdir()
        assert repo.is_repository()
        assert repo.git_dir == tmp_path / "work" / ".git"
        assert repo.name == "work"

    def test_current_branch(self, origin_repo: Path) -> None:
        assert Repository(origin_repo).current_branch() == "main"

    def test_current_branch_detached(self, origin_repo: Path) -> None:
        git(origin_repo, "checkout", "-q", "--detach")
        assert Repository(origin_repo).current_branch() is None

    def test_current_branch_without_metadata(self, tmp_path: Path) -> None:
        assert Repository(tmp_path).current_branch() is None

    def test_real_git_exit_codes(self, origin_repo: Path) -> None:
        repo = Repository(origin_repo)
        assert repo.checkout("main", policy=OutputPolicy.SUPPRESS_ALL) == 0
        assert repo.checkout("no-such-branch", policy=OutputPolicy.SUPPRESS_ALL) != 0
