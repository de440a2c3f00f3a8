"""
Configuration data models for repatch.

These models define the structure of .repatch.json and
~/.config/repatch/config.json files, with validation via Pydantic.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepatchConfig(BaseModel):
    """
    Settings for one patch queue.

    Paths may be relative; `resolve_paths` anchors them to a project
    directory before the engine sees them.
    """

    model_config = ConfigDict(extra="ignore")

    upstream_dir: Path = Field(
        default=Path("upstream"),
        description="Upstream git repository the queue is based on",
    )
    patch_dir: Path = Field(
        default=Path("patches"),
        description="Directory holding the ordered patch files",
    )
    output_dir: Path = Field(
        default=Path("work"),
        description="Repository the queue is applied to (cloned if missing)",
    )
    branch: str = Field(
        default="master",
        description="Branch or ref tracked in the upstream repository",
    )
    upstream_branch: str = Field(
        default="upstream",
        description="Mirror branch forced to `branch` before every apply",
    )
    verbose: bool = Field(
        default=False,
        description="Stream git output and progress messages",
    )
    patch_extension: str = Field(
        default=".patch",
        description="File suffix identifying patches in patch_dir",
    )
    git_executable: str = Field(
        default="git",
        description="Name or path of the git binary",
    )
    rebuild_command: str = Field(
        default="git format-patch",
        description="Command suggested for saving resolved conflicts as patches",
    )

    @field_validator("branch", "upstream_branch", "git_executable")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("patch_extension")
    @classmethod
    def _extension_has_dot(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"patch_extension must look like '.patch', got {v!r}")
        return v

    def resolve_paths(self, base: Path) -> "RepatchConfig":
        """Return a copy with every directory made absolute relative to base."""
        base = Path(base)

        def _resolve(path: Path) -> Path:
            path = path.expanduser()
            return path if path.is_absolute() else (base / path).absolute()

        return self.model_copy(
            update={
                "upstream_dir": _resolve(self.upstream_dir),
                "patch_dir": _resolve(self.patch_dir),
                "output_dir": _resolve(self.output_dir),
            }
        )
