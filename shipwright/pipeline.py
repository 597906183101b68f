"""Shipwright scaffolding pipeline.

Runs the steps that turn validated options into a ready project:

validate-destination -- Refuse to touch an existing path.
refresh-versions     -- Refresh cached dependency versions (assembled stacks).
generate             -- Delegate to the stack's generator or render the tree.
install              -- Install dependencies in every manifest directory.
secondary-tools      -- shadcn init, NativeWind install.
git                  -- Initialise a repository and commit the tree.
report               -- Render the closing report.

Steps marked ``required`` abort the run when they fail; every other step is
best effort and records a warning instead.

Usage::

    options = build_options({"project_name": "my-api", "stack": "express-api"})
    result = await ScaffoldPipeline(options, Settings.from_env()).run()
"""

from __future__ import annotations

import os
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, Field

from shipwright.config import Settings
from shipwright.git import GitManager, GitOutcome
from shipwright.options import ProjectOptions
from shipwright.reporter import render_report
from shipwright.scaffolder import GenerationError, ProjectGenerator
from shipwright.selector import AssembleStrategy, DelegateStrategy, secondary_tools, select_strategy
from shipwright.utils import (
    console,
    format_duration,
    print_info,
    print_step_header,
    print_success,
    print_warning,
)
from shipwright.versions import VersionResolver
from shipwright.workspace import CommandRunner, FileSystem, LocalFileSystem, SubprocessRunner

__all__ = [
    "DestinationExistsError",
    "GenerationError",
    "ScaffoldPipeline",
    "ScaffoldResult",
    "Step",
    "StepResult",
    "StepStatus",
]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class DestinationExistsError(Exception):
    """Raised before any side effect when the project path already exists."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Destination already exists: {self.path}")


# ---------------------------------------------------------------------------
# Step bookkeeping
# ---------------------------------------------------------------------------


class StepStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    WARNING = "warning"


class StepResult(BaseModel):
    """Outcome of one pipeline step."""

    name: str
    status: StepStatus
    detail: str = ""
    duration: float = Field(default=0.0, description="Wall-clock seconds")


Outcome = tuple[StepStatus, str]


@dataclass(frozen=True)
class Step:
    name: str
    action: Callable[[], Awaitable[Outcome]]
    required: bool = False


class ScaffoldResult(BaseModel):
    """Everything the caller needs after a successful run."""

    options: ProjectOptions
    project_path: Path
    strategy: str
    steps: list[StepResult] = Field(default_factory=list)
    report: str = ""

    @property
    def warnings(self) -> list[StepResult]:
        return [step for step in self.steps if step.status is StepStatus.WARNING]

    def step(self, name: str) -> Optional[StepResult]:
        return next((s for s in self.steps if s.name == name), None)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class ScaffoldPipeline:
    """Creates one project from validated options.

    Every collaborator is injectable so the pipeline can run against fakes.

    Args:
        options: Validated project options.
        settings: Runtime settings (timeouts, cache location).
        parent_dir: Directory the project folder is created in.
        runner: Runs external commands (generators, installs, git).
        fs: File-system access used for staging and writing.
        resolver: Dependency version resolver.
        generator: Renders assembled stacks.
    """

    def __init__(
        self,
        options: ProjectOptions,
        settings: Settings | None = None,
        *,
        parent_dir: str | Path = ".",
        runner: CommandRunner | None = None,
        fs: FileSystem | None = None,
        resolver: VersionResolver | None = None,
        generator: ProjectGenerator | None = None,
    ) -> None:
        self.options = options
        self.settings = settings or Settings()
        self.parent_dir = Path(parent_dir)
        self.destination = self.parent_dir / options.project_name
        self.runner = runner or SubprocessRunner()
        self.fs = fs or LocalFileSystem()
        self.resolver = resolver or VersionResolver.from_settings(self.settings)
        self.generator = generator or ProjectGenerator(self.resolver)
        self.strategy = select_strategy(options)
        self.report = ""

    # ------------------------------------------------------------------
    # Step table
    # ------------------------------------------------------------------

    def steps(self) -> list[Step]:
        return [
            Step("validate-destination", self._validate_destination, required=True),
            Step("refresh-versions", self._refresh_versions),
            Step("generate", self._generate, required=True),
            Step("install", self._install),
            Step("secondary-tools", self._secondary_tools),
            Step("git", self._git),
            Step("report", self._report),
        ]

    async def run(self) -> ScaffoldResult:
        """Run every step in order.

        Raises:
            DestinationExistsError: The project path already exists.
            GenerationError: The tree could not be produced or written.
        """
        steps = self.steps()
        results: list[StepResult] = []
        started = time.monotonic()

        for index, step in enumerate(steps, start=1):
            print_step_header(index, len(steps), step.name)
            step_start = time.monotonic()
            try:
                status, detail = await step.action()
            except (DestinationExistsError, GenerationError):
                raise
            except Exception as exc:
                if step.required:
                    raise GenerationError(f"{step.name} failed: {exc}", detail=repr(exc)) from exc
                status, detail = StepStatus.WARNING, str(exc) or type(exc).__name__

            result = StepResult(
                name=step.name,
                status=status,
                detail=detail,
                duration=time.monotonic() - step_start,
            )
            results.append(result)
            self._announce(result)

        print_success(
            f"{self.options.project_name} created in {format_duration(time.monotonic() - started)}"
        )
        return ScaffoldResult(
            options=self.options,
            project_path=self.destination,
            strategy=self.strategy.kind,
            steps=results,
            report=self.report,
        )

    @staticmethod
    def _announce(result: StepResult) -> None:
        if result.status is StepStatus.WARNING:
            print_warning(f"  {result.name}: {result.detail}")
        elif result.status is StepStatus.SKIPPED:
            print_info(f"  skipped: {result.detail}")
        else:
            console.print(f"  [green]+[/green] {result.detail or result.name}")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _validate_destination(self) -> Outcome:
        if await self.fs.path_exists(self.destination):
            raise DestinationExistsError(self.destination)
        await self.fs.ensure_dir(self.parent_dir)
        return StepStatus.OK, f"{self.destination} is free"

    async def _refresh_versions(self) -> Outcome:
        if not isinstance(self.strategy, AssembleStrategy):
            return StepStatus.SKIPPED, f"versions are chosen by {self.strategy.tool}"
        if self.resolver.offline:
            return StepStatus.SKIPPED, "offline; using cached and bundled versions"
        names = self.generator.required_packages(self.options)
        await self.resolver.resolve_many(names)
        return StepStatus.OK, f"{len(names)} package versions resolved"

    async def _generate(self) -> Outcome:
        if isinstance(self.strategy, DelegateStrategy):
            return await self._delegate(self.strategy)
        return await self._assemble()

    async def _delegate(self, strategy: DelegateStrategy) -> Outcome:
        invocation = strategy.invocation
        print_info(f"  $ {invocation.display}")
        result = await self.runner.run(
            invocation.command,
            list(invocation.args),
            cwd=self.parent_dir,
            capture=False,
            timeout=self.settings.command_timeout,
        )
        if not result.ok:
            raise GenerationError(
                f"{strategy.tool} failed ({result.describe()})",
                path=str(self.destination),
                detail=result.stderr,
            )
        if not await self.fs.path_exists(self.destination):
            raise GenerationError(
                f"{strategy.tool} finished but did not create {self.destination}",
                path=str(self.destination),
            )
        return StepStatus.OK, f"created with {strategy.tool}"

    async def _assemble(self) -> Outcome:
        files = self.generator.generate(self.options)
        suffix = f"{os.getpid()}-{uuid.uuid4().hex[:8]}"
        staging = self.parent_dir / f".{self.options.project_name}.partial-{suffix}"
        try:
            await self.generator.write(files, staging, self.fs)
            await self.fs.rename(staging, self.destination)
        except Exception as exc:
            await self.fs.remove_tree(staging)
            raise GenerationError(
                f"Could not write the project: {exc}", path=str(self.destination), detail=repr(exc)
            ) from exc
        return StepStatus.OK, f"{len(files)} files written"

    async def _install(self) -> Outcome:
        if not self.options.install:
            return StepStatus.SKIPPED, "--no-install"
        if isinstance(self.strategy, DelegateStrategy) and self.strategy.installs_dependencies:
            return StepStatus.SKIPPED, f"dependencies installed by {self.strategy.tool}"

        install_dirs = self.strategy.install_dirs if isinstance(self.strategy, AssembleStrategy) else (".",)
        pm = self.options.package_manager
        command, *args = pm.install_args
        failed: list[str] = []
        for directory in install_dirs:
            print_info(f"  $ {pm.value} install ({directory})")
            result = await self.runner.run(
                command,
                args,
                cwd=self.destination / directory,
                timeout=self.settings.command_timeout,
            )
            if not result.ok:
                failed.append(f"{directory}: {result.describe()}")

        if failed:
            return StepStatus.WARNING, "install failed in " + "; ".join(failed)
        return StepStatus.OK, f"dependencies installed with {pm.value}"

    async def _secondary_tools(self) -> Outcome:
        tools = secondary_tools(self.options)
        if not tools:
            return StepStatus.SKIPPED, "nothing to run"
        if not self.options.install:
            return StepStatus.SKIPPED, "--no-install"

        failed: list[str] = []
        for tool in tools:
            print_info(f"  $ {tool.display}")
            result = await self.runner.run(
                tool.command,
                list(tool.args),
                cwd=self.destination / tool.cwd,
                timeout=self.settings.command_timeout,
            )
            if not result.ok:
                failed.append(f"{tool.name}: {result.describe()}")

        if failed:
            return StepStatus.WARNING, "project created, but " + "; ".join(failed)
        return StepStatus.OK, ", ".join(tool.name for tool in tools) + " set up"

    async def _git(self) -> Outcome:
        if not self.options.git:
            return StepStatus.SKIPPED, "--no-git"
        manager = GitManager(self.runner, self.fs, timeout=self.settings.git_timeout)
        try:
            outcome = await manager.initialise(self.destination)
        except Exception as exc:
            return StepStatus.WARNING, f"project created, but git was not initialised: {exc}"
        if outcome is GitOutcome.UNAVAILABLE:
            return StepStatus.WARNING, "project created, but git is not installed"
        if outcome is GitOutcome.ALREADY_COMMITTED:
            return StepStatus.SKIPPED, "repository already has commits"
        return StepStatus.OK, "repository initialised with a first commit"

    async def _report(self) -> Outcome:
        self.report = render_report(self.options, self.destination)
        return StepStatus.OK, "report ready"
