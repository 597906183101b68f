"""File-system and process collaborators used by the pipeline.

The scaffolding core never spawns processes or touches the disk directly.
It calls a :class:`CommandRunner` and a :class:`FileSystem`; the local
implementations below are what the CLI uses, and tests substitute fakes.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from shipwright.utils import run_command


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def describe(self) -> str:
        """Short failure description suitable for a warning line."""
        detail = self.stderr or self.stdout
        if detail:
            detail = detail.strip().splitlines()[-1]
        return f"exit {self.exit_code}" + (f": {detail}" if detail else "")


class CommandRunner(Protocol):
    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: Path | None = None,
        capture: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult: ...


class FileSystem(Protocol):
    async def write_file(self, path: Path, content: str) -> None: ...

    async def ensure_dir(self, path: Path) -> None: ...

    async def path_exists(self, path: Path) -> bool: ...

    async def rename(self, source: Path, target: Path) -> None: ...

    async def remove_tree(self, path: Path) -> None: ...


class SubprocessRunner:
    """:class:`CommandRunner` backed by asyncio subprocesses."""

    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: Path | None = None,
        capture: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        code, out, err = await run_command(
            [command, *args], cwd=cwd, timeout=timeout, capture=capture
        )
        return CommandResult(exit_code=code, stdout=out, stderr=err)


class LocalFileSystem:
    """:class:`FileSystem` over the real disk; blocking calls run in a thread."""

    async def write_file(self, path: Path, content: str) -> None:
        await asyncio.to_thread(_write_file, Path(path), content)

    async def ensure_dir(self, path: Path) -> None:
        await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)

    async def path_exists(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).exists)

    async def rename(self, source: Path, target: Path) -> None:
        await asyncio.to_thread(Path(source).rename, Path(target))

    async def remove_tree(self, path: Path) -> None:
        await asyncio.to_thread(shutil.rmtree, Path(path), True)


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
