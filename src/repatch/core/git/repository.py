"""
Addressable git repository handle.

A Repository is just a path plus the means to run git inside it. Every
operation returns the git exit code; deciding whether a failure matters is
left to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from repatch.core.output import OutputPolicy, OutputRouter
from repatch.core.process import CommandRunner, run_command


class Repository:
    """
    Runs git subcommands scoped to one directory.

    Example:
        >>> repo = Repository(Path("work"))
        >>> repo.fetch("upstream", policy=OutputPolicy.SUPPRESS_ALL)
        0
    """

    def __init__(
        self,
        path: Path,
        *,
        runner: CommandRunner = run_command,
        router: OutputRouter | None = None,
        git_executable: str = "git",
    ) -> None:
        self.path = Path(path)
        self.runner = runner
        self.router = router or OutputRouter()
        self.git_executable = git_executable
        self.last_command: list[str] | None = None

    @property
    def git_dir(self) -> Path:
        """Metadata directory of a non-bare repository."""
        return self.path / ".git"

    @property
    def name(self) -> str:
        return self.path.name

    def is_repository(self) -> bool:
        """Check whether the path exists and carries git metadata."""
        return self.path.exists() and self.git_dir.exists()

    def current_branch(self) -> str | None:
        """Branch HEAD points at, read from the metadata (None if detached)."""
        head = self.git_dir / "HEAD"
        if not head.is_file():
            return None
        content = head.read_text().strip()
        prefix = "ref: refs/heads/"
        if content.startswith(prefix):
            return content[len(prefix) :]
        return None

    def command(self, *args: str) -> list[str]:
        """Build the argv for a git subcommand."""
        return [self.git_executable, *args]

    def git(self, *args: str, policy: OutputPolicy = OutputPolicy.SEPARATE_STREAMS) -> int:
        """Run an arbitrary git subcommand in this repository."""
        sinks = self.router.route(policy)
        self.last_command = self.command(*args)
        return self.runner(self.path, self.last_command, sinks.stdout, sinks.stderr)

    def fetch(
        self, remote: str | None = None, *, policy: OutputPolicy = OutputPolicy.SEPARATE_STREAMS
    ) -> int:
        args = ["fetch"] if remote is None else ["fetch", remote]
        return self.git(*args, policy=policy)

    def force_branch(
        self, name: str, ref: str, *, policy: OutputPolicy = OutputPolicy.ERRORS_ONLY
    ) -> int:
        """Create or move a branch to ref without a fast-forward check."""
        return self.git("branch", "-f", name, ref, policy=policy)

    def clone(
        self, source: Path, dest: str, *, policy: OutputPolicy = OutputPolicy.SEPARATE_STREAMS
    ) -> int:
        """Clone source into dest, relative to this handle's directory."""
        return self.git("clone", str(source), dest, policy=policy)

    def remove_remote(
        self, name: str, *, policy: OutputPolicy = OutputPolicy.SUPPRESS_ALL
    ) -> int:
        return self.git("remote", "rm", name, policy=policy)

    def add_remote(
        self, name: str, url: str, *, policy: OutputPolicy = OutputPolicy.SUPPRESS_ALL
    ) -> int:
        return self.git("remote", "add", name, url, policy=policy)

    def checkout(
        self,
        branch: str,
        *,
        create: bool = False,
        policy: OutputPolicy = OutputPolicy.SEPARATE_STREAMS,
    ) -> int:
        args = ["checkout", "-b", branch] if create else ["checkout", branch]
        return self.git(*args, policy=policy)

    def reset_hard(
        self, ref: str, *, policy: OutputPolicy = OutputPolicy.SEPARATE_STREAMS
    ) -> int:
        return self.git("reset", "--hard", ref, policy=policy)

    def abort_am(self, *, policy: OutputPolicy = OutputPolicy.SUPPRESS_ALL) -> int:
        """Abort an in-progress `git am`, if any."""
        return self.git("am", "--abort", policy=policy)

    def apply_mailbox(
        self, patches: Sequence[Path], *, policy: OutputPolicy = OutputPolicy.ERRORS_ONLY
    ) -> int:
        """Apply all patches in a single three-way `git am` call."""
        paths = [str(Path(p).absolute()) for p in patches]
        return self.git("am", "--3way", "--ignore-whitespace", *paths, policy=policy)
