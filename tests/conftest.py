"""Shared pytest fixtures for the Shipwright test suite.

Provides reusable fixtures for:
- Temporary project directories and a real temporary git repository
- A recording fake ``CommandRunner`` and an in-memory ``FileSystem``
- An in-memory npm registry served through ``httpx.MockTransport``
- Version resolvers that never touch the network
- Option factories for the assembled stacks
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from shipwright.options import ProjectOptions, build_options
from shipwright.registry_client import RegistryClient
from shipwright.scaffolder import ProjectGenerator
from shipwright.versions import MemoryStore, VersionResolver
from shipwright.workspace import CommandResult


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary parent directory for generated projects (auto-cleanup)."""
    project_dir = tmp_path / "workspace"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Temporary git repository with an initial commit."""
    repo_dir = tmp_path / "test-repo"
    repo_dir.mkdir()
    subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@shipwright.local"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Shipwright Test"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    subprocess.run(
        ["git", "config", "commit.gpgsign", "false"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    (repo_dir / "README.md").write_text("# Test Project\n", encoding="utf-8")
    subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
    subprocess.run(
        ["git", "commit", "-m", "Initial commit"],
        cwd=repo_dir, check=True, capture_output=True,
    )
    yield repo_dir


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """Records every command and answers from a table of canned results.

    ``responses`` maps a command prefix (``"git init"``, ``"npm install"``)
    to a :class:`CommandResult`; the longest matching prefix wins and
    unmatched commands succeed.  ``on_run`` hooks let a test simulate side
    effects such as a delegated generator creating its directory.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: dict[str, CommandResult] = {}
        self.hooks: dict[str, Callable[[Optional[Path]], None]] = {}

    def respond(self, prefix: str, exit_code: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[prefix] = CommandResult(exit_code, stdout, stderr)

    def on_run(self, prefix: str, hook: Callable[[Optional[Path]], None]) -> None:
        self.hooks[prefix] = hook

    @property
    def commands(self) -> list[str]:
        return [call["line"] for call in self.calls]

    def _match(self, table: dict[str, Any], line: str) -> Any:
        matches = [prefix for prefix in table if line.startswith(prefix)]
        return table[max(matches, key=len)] if matches else None

    async def run(
        self,
        command: str,
        args: list[str],
        *,
        cwd: Path | None = None,
        capture: bool = True,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        line = " ".join([command, *args])
        self.calls.append({"line": line, "cwd": cwd, "capture": capture, "timeout": timeout})
        hook = self._match(self.hooks, line)
        if hook is not None:
            hook(cwd)
        return self._match(self.responses, line) or CommandResult(0)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A :class:`FakeRunner` where every command succeeds by default."""
    return FakeRunner()


# ---------------------------------------------------------------------------
# In-memory file system
# ---------------------------------------------------------------------------


class MemoryFileSystem:
    """``FileSystem`` keeping files in a dict keyed by POSIX path."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.dirs: set[str] = set()
        self.fail_on_write: Optional[str] = None

    async def write_file(self, path: Path, content: str) -> None:
        key = Path(path).as_posix()
        if self.fail_on_write and key.endswith(self.fail_on_write):
            raise OSError(f"disk full while writing {key}")
        self.files[key] = content
        self.dirs.update(parent.as_posix() for parent in Path(path).parents)

    async def ensure_dir(self, path: Path) -> None:
        self.dirs.add(Path(path).as_posix())

    async def path_exists(self, path: Path) -> bool:
        key = Path(path).as_posix()
        return key in self.files or key in self.dirs

    async def rename(self, source: Path, target: Path) -> None:
        src, dst = Path(source).as_posix(), Path(target).as_posix()
        self.files = {
            (dst + key[len(src):] if key == src or key.startswith(src + "/") else key): value
            for key, value in self.files.items()
        }
        self.dirs = {
            dst + key[len(src):] if key == src or key.startswith(src + "/") else key
            for key in self.dirs
        }

    async def remove_tree(self, path: Path) -> None:
        prefix = Path(path).as_posix()
        self.files = {
            k: v for k, v in self.files.items() if k != prefix and not k.startswith(prefix + "/")
        }
        self.dirs = {k for k in self.dirs if k != prefix and not k.startswith(prefix + "/")}

    def under(self, root: Path) -> dict[str, str]:
        """Files below *root*, keyed by their path relative to it."""
        prefix = Path(root).as_posix() + "/"
        return {k[len(prefix):]: v for k, v in self.files.items() if k.startswith(prefix)}


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()


# ---------------------------------------------------------------------------
# Mock npm registry
# ---------------------------------------------------------------------------


class RegistryStub:
    """Serves ``GET /<package>/latest`` from a dict; unknown packages 404."""

    def __init__(self, versions: dict[str, str] | None = None) -> None:
        self.versions: dict[str, str] = dict(versions or {})
        self.failures: dict[str, Exception] = {}
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        package = path.removeprefix("/").removesuffix("/latest").replace("%2F", "/")
        if package in self.failures:
            raise self.failures[package]
        if package not in self.versions:
            return httpx.Response(404, json={"error": "Not found"})
        return httpx.Response(200, json={"name": package, "version": self.versions[package]})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def registry() -> RegistryStub:
    return RegistryStub({"express": "4.21.2", "zod": "3.24.1", "typescript": "5.7.3"})


@pytest.fixture
def registry_client(registry: RegistryStub) -> RegistryClient:
    return RegistryClient("https://registry.test", timeout=2.0, transport=registry.transport())


# ---------------------------------------------------------------------------
# Resolvers & generators
# ---------------------------------------------------------------------------


@pytest.fixture
def offline_resolver() -> VersionResolver:
    """Resolver answering only from the bundled table."""
    return VersionResolver.offline_only()


@pytest.fixture
def generator(offline_resolver: VersionResolver) -> ProjectGenerator:
    return ProjectGenerator(offline_resolver)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@pytest.fixture
def make_options() -> Callable[..., ProjectOptions]:
    """Factory building validated options; keyword arguments are raw answers."""

    def factory(stack: str = "express-api", name: str = "my-api", **answers: Any) -> ProjectOptions:
        return build_options({"project_name": name, "stack": stack, **answers})

    return factory


@pytest.fixture
def minimal_express(make_options) -> ProjectOptions:
    return make_options("express-api")


@pytest.fixture
def full_express(make_options) -> ProjectOptions:
    return make_options(
        "express-api",
        database="postgresql",
        include_auth=True,
        include_api_docs=True,
        include_container=True,
    )
