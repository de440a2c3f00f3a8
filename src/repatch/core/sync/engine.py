"""
Patch queue synchronization engine.

Rebuilds the patched state of an output repository from an upstream
repository and a directory of patch files. A run moves through these
states, aborting on the first unexpected git failure:

    Start -> UpstreamSynced -> OutputProvisioned -> OutputReset
          -> QueueLoaded -> Applying -> Success | Conflicted

The output repository is never trusted to be clean: it is hard-reset to the
upstream mirror branch on every run, and any `git am` left over from a
failed run is aborted before the queue is applied again. The whole queue
goes to a single three-way `git am` call so a human can resume a conflicted
apply with the same command family.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from rich.console import Console

from repatch.core.errors import PatchApplyFailure, SyncFailure
from repatch.core.git import Repository
from repatch.core.host import PlatformInfo, SystemPlatform
from repatch.core.marker import RecoveryMarker
from repatch.core.output import OutputPolicy, OutputRouter
from repatch.core.patches import DEFAULT_EXTENSION, PatchFile, load_patches
from repatch.core.process import CommandRunner, run_command
from repatch.core.sync.models import (
    UPSTREAM_REMOTE,
    OutputRepository,
    SyncResult,
    SyncStep,
    UpstreamRef,
)

logger = logging.getLogger(__name__)

DEFAULT_REBUILD_COMMAND = "git format-patch"


def conflict_diagnostic(
    target: str,
    rebuild_command: str = DEFAULT_REBUILD_COMMAND,
    platform: PlatformInfo | None = None,
) -> list[str]:
    """Lines shown when the queue did not apply cleanly to target."""
    lines = [
        f"***   Something did not apply cleanly to {target}.",
        "***   Please review above details and finish the apply then",
        f"***   save the changes with `{rebuild_command}`",
    ]
    if platform is not None and platform.is_windows:
        lines.extend(
            [
                "",
                "***   Because you're on Windows you'll need to finish the AM,",
                "***   rebuild all patches, and then re-run the patch apply again.",
                "***   Consider using the scripts with Windows Subsystem for Linux.",
            ]
        )
    return lines


class PatchQueueSync:
    """
    Applies a patch queue on top of an upstream repository.

    Example:
        >>> engine = PatchQueueSync(
        ...     UpstreamRef(Path("upstream"), "master", "upstream"),
        ...     OutputRepository(Path("work")),
        ...     Path("patches"),
        ... )
        >>> result = engine.run()
        >>> print(result.summary())
    """

    def __init__(
        self,
        upstream: UpstreamRef,
        output: OutputRepository,
        patch_dir: Path,
        *,
        verbose: bool = False,
        runner: CommandRunner = run_command,
        platform: PlatformInfo | None = None,
        console: Console | None = None,
        error_console: Console | None = None,
        git_executable: str = "git",
        patch_extension: str = DEFAULT_EXTENSION,
        rebuild_command: str = DEFAULT_REBUILD_COMMAND,
    ) -> None:
        """
        Args:
            upstream: Upstream repository and branches
            output: Repository the queue is applied to
            patch_dir: Directory holding the patch files
            verbose: Stream git output and progress lines to the console
            runner: Process runner used for every git invocation
            platform: Host information for the conflict hint
            console: Destination for progress lines
            error_console: Destination for the conflict diagnostic
            git_executable: Name or path of the git binary
            patch_extension: Suffix identifying patch files
            rebuild_command: Command named in the conflict diagnostic
        """
        self.upstream = upstream
        self.output = output
        self.patch_dir = Path(patch_dir)
        self.verbose = verbose
        self.platform = platform or SystemPlatform()
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.patch_extension = patch_extension
        self.rebuild_command = rebuild_command

        router = OutputRouter(verbose=verbose)
        self._upstream_repo = Repository(
            upstream.path, runner=runner, router=router, git_executable=git_executable
        )
        self._output_repo = Repository(
            output.path, runner=runner, router=router, git_executable=git_executable
        )
        self._parent_repo = Repository(
            output.path.parent, runner=runner, router=router, git_executable=git_executable
        )
        self.marker = RecoveryMarker(self._output_repo.git_dir)

    def _say(self, message: str) -> None:
        if self.verbose:
            self.console.print(message, markup=False, highlight=False, soft_wrap=True)

    def _check(self, step: SyncStep, repo: Repository, exit_code: int) -> int:
        """Raise SyncFailure for a failed step unless the step is tolerated."""
        if exit_code == 0:
            return exit_code
        if step.tolerated:
            logger.debug("Ignoring exit %d from %s (%s)", exit_code, step.value, repo.path)
            return exit_code
        command = repo.last_command or []
        raise SyncFailure(
            f"{step.value} failed with exit code {exit_code}: {' '.join(command)}",
            step=step,
            command=command,
            exit_code=exit_code,
        )

    def sync_upstream(self) -> None:
        """Fetch upstream and force the mirror branch to the tracked branch."""
        repo = self._upstream_repo
        self._check(
            SyncStep.FETCH_UPSTREAM,
            repo,
            repo.fetch(policy=OutputPolicy.SEPARATE_STREAMS),
        )
        self._check(
            SyncStep.UPDATE_MIRROR,
            repo,
            repo.force_branch(
                self.upstream.upstream_branch,
                self.upstream.branch,
                policy=OutputPolicy.ERRORS_ONLY,
            ),
        )

    def provision_output(self) -> bool:
        """
        Clone the upstream into the output path unless a repository is there.

        Returns:
            True if a fresh clone was made
        """
        if self._output_repo.is_repository():
            return False

        path = self.output.path
        if path.exists():
            logger.info("Removing stale output directory %s", path)
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        path.parent.mkdir(parents=True, exist_ok=True)

        parent = self._parent_repo
        self._check(
            SyncStep.CLONE_OUTPUT,
            parent,
            parent.clone(
                self.upstream.path.absolute(),
                path.name,
                policy=OutputPolicy.SEPARATE_STREAMS,
            ),
        )
        return True

    def reset_output(self) -> None:
        """Point the output branch at the upstream mirror, discarding local state."""
        repo = self._output_repo
        upstream_url = str(self.upstream.path.absolute())
        branch = self.output.branch

        self._say(f"   Resetting {self.output.name} to {self.upstream.path.name}...")

        self._check(
            SyncStep.REMOVE_REMOTE,
            repo,
            repo.remove_remote(UPSTREAM_REMOTE, policy=OutputPolicy.SUPPRESS_ALL),
        )
        self._check(
            SyncStep.ADD_REMOTE,
            repo,
            repo.add_remote(UPSTREAM_REMOTE, upstream_url, policy=OutputPolicy.SUPPRESS_ALL),
        )
        self._check(
            SyncStep.FETCH_REMOTE,
            repo,
            repo.fetch(UPSTREAM_REMOTE, policy=OutputPolicy.SUPPRESS_ALL),
        )

        # Any checkout failure falls back to creating the branch
        checkout = self._check(
            SyncStep.CHECKOUT_BRANCH,
            repo,
            repo.checkout(branch, policy=OutputPolicy.STDOUT_ONLY),
        )
        if checkout != 0:
            created = repo.checkout(branch, create=True, policy=OutputPolicy.MERGE_ERRORS)
            # An unmerged index from a conflicted apply makes both checkouts
            # fail while already on the branch; the hard reset clears it.
            if created != 0 and repo.current_branch() == branch:
                logger.debug("Already on %s, continuing with reset", branch)
            else:
                self._check(SyncStep.CREATE_BRANCH, repo, created)

        self._check(
            SyncStep.RESET_BRANCH,
            repo,
            repo.reset_hard(self.upstream.mirror_ref, policy=OutputPolicy.SEPARATE_STREAMS),
        )

    def load_queue(self) -> list[PatchFile]:
        """Clear leftover apply state and load the ordered patch queue."""
        self._say(f"   Applying patches to {self.output.name}...")

        self.marker.clear()
        repo = self._output_repo
        self._check(
            SyncStep.ABORT_APPLY,
            repo,
            repo.abort_am(policy=OutputPolicy.SUPPRESS_ALL),
        )
        return load_patches(self.patch_dir, self.patch_extension)

    def apply(self, patches: Sequence[PatchFile]) -> None:
        """
        Apply the whole queue in one three-way `git am`.

        Raises:
            PatchApplyFailure: If any patch fails to apply
        """
        repo = self._output_repo
        exit_code = repo.apply_mailbox(
            [patch.path for patch in patches], policy=OutputPolicy.ERRORS_ONLY
        )

        if exit_code != 0:
            self.marker.mark()
            for line in conflict_diagnostic(self.output.name, self.rebuild_command, self.platform):
                self.error_console.print(line, markup=False, highlight=False, soft_wrap=True)
            raise PatchApplyFailure(
                "Failed to apply patches",
                marker_path=self.marker.path,
                patches=patches,
                step=SyncStep.APPLY_PATCHES,
                command=repo.last_command,
                exit_code=exit_code,
            )

        self.marker.clear()
        self._say(f"   Patches applied cleanly to {self.output.name}")

    def run(self) -> SyncResult:
        """
        Run a full synchronization.

        Returns:
            SyncResult describing the successful run

        Raises:
            LaunchFailure: If git cannot be started
            SyncFailure: If a non-tolerated step fails
            PatchApplyFailure: If the queue does not apply cleanly
        """
        started_at = datetime.now()
        logger.info(
            "Syncing %s onto %s (%s -> %s)",
            self.output.path,
            self.upstream.path,
            self.upstream.branch,
            self.upstream.upstream_branch,
        )

        self.sync_upstream()
        cloned = self.provision_output()
        self.reset_output()
        patches = self.load_queue()

        if not patches:
            self._say("No patches found")
            return SyncResult(
                cloned=cloned,
                message="no patches found",
                started_at=started_at,
                completed_at=datetime.now(),
            )

        self.apply(patches)
        return SyncResult(
            cloned=cloned,
            patches=[patch.name for patch in patches],
            started_at=started_at,
            completed_at=datetime.now(),
        )
