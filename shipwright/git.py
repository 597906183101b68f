"""Repository initialisation for freshly generated projects.

Initialising is idempotent: an existing ``.git`` directory is reused and a
repository that already has a commit is left untouched, so re-running the
step over a delegated tool's output (some tools run ``git init`` themselves)
never fails.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from shipwright.workspace import CommandResult, CommandRunner, FileSystem

INITIAL_COMMIT_MESSAGE = "Initial commit from Shipwright"

# Applied per key when the user has not configured it.
_FALLBACK_IDENTITY = {"user.name": "Shipwright", "user.email": "shipwright@localhost"}


class GitOutcome(str, Enum):
    INITIALISED = "initialised"  # new repository, first commit created
    COMMITTED = "committed"  # existing empty repository, first commit created
    ALREADY_COMMITTED = "already-committed"  # existing history, nothing done
    UNAVAILABLE = "unavailable"  # git is not installed


class GitError(Exception):
    """Raised when a git command fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class GitManager:
    """Initialises a repository in a project directory and commits the tree."""

    def __init__(self, runner: CommandRunner, fs: FileSystem, timeout: float = 60.0) -> None:
        self.runner = runner
        self.fs = fs
        self.timeout = timeout

    async def _git(self, project: Path, *args: str, check: bool = True) -> CommandResult:
        result = await self.runner.run("git", list(args), cwd=project, timeout=self.timeout)
        if check and not result.ok:
            command = " ".join(["git", *args])
            raise GitError(
                f"Git command failed ({result.describe()}): {command}",
                command=command,
                stderr=result.stderr,
            )
        return result

    async def is_available(self) -> bool:
        result = await self.runner.run("git", ["--version"], timeout=self.timeout)
        return result.ok

    async def is_repository(self, project: Path) -> bool:
        return await self.fs.path_exists(Path(project) / ".git")

    async def has_commits(self, project: Path) -> bool:
        result = await self._git(project, "rev-parse", "--verify", "HEAD", check=False)
        return result.ok

    async def initialise(self, project: Path) -> GitOutcome:
        """Make sure *project* is a repository with at least one commit.

        Raises:
            GitError: If ``init``, ``add`` or ``commit`` fails.
        """
        project = Path(project)
        if not await self.is_available():
            return GitOutcome.UNAVAILABLE

        existed = await self.is_repository(project)
        if existed and await self.has_commits(project):
            return GitOutcome.ALREADY_COMMITTED
        if not existed:
            await self._git(project, "init")

        await self._git(project, "add", "-A")
        prefix: list[str] = []
        for key, fallback in _FALLBACK_IDENTITY.items():
            configured = await self._git(project, "config", key, check=False)
            if not (configured.ok and configured.stdout.strip()):
                prefix += ["-c", f"{key}={fallback}"]
        await self._git(project, *prefix, "commit", "-m", INITIAL_COMMIT_MESSAGE)

        return GitOutcome.COMMITTED if existed else GitOutcome.INITIALISED
