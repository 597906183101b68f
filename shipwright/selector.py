"""Map project options to a generation strategy.

Some stacks are produced by the ecosystem's own generator (``create-next-app``
and friends); the rest are assembled file by file by
:mod:`shipwright.scaffolder`.  Selection is a pure function of the options:
nothing here spawns a process or touches the disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from shipwright.options import PackageManager, ProjectOptions, Stack, Styling


@dataclass(frozen=True)
class ToolInvocation:
    """One external command, run from the project's parent or root directory."""

    name: str
    command: str
    args: tuple[str, ...]
    cwd: str = "."

    @property
    def display(self) -> str:
        return " ".join([self.command, *self.args])


@dataclass(frozen=True)
class DelegateStrategy:
    """Let an external generator create the whole tree.

    ``invocation`` runs from the destination's parent directory and creates
    ``<project_name>`` itself.
    """

    tool: str
    invocation: ToolInvocation
    installs_dependencies: bool

    kind: str = field(default="delegate", init=False)

    @property
    def args(self) -> tuple[str, ...]:
        return self.invocation.args


@dataclass(frozen=True)
class AssembleStrategy:
    """Render the tree with the built-in generator.

    ``install_dirs`` lists every directory (relative to the project root)
    holding a manifest that needs its dependencies installed.
    """

    profile: str
    install_dirs: tuple[str, ...] = (".",)

    kind: str = field(default="assemble", init=False)


Strategy = Union[DelegateStrategy, AssembleStrategy]


# ---------------------------------------------------------------------------
# Delegate flag builders (one per external tool)
# ---------------------------------------------------------------------------


def _exec(pm: PackageManager, package: str, args: list[str]) -> ToolInvocation:
    prefix = pm.exec_prefix
    return ToolInvocation(
        name=package.split("@latest")[0],
        command=prefix[0],
        args=tuple([*prefix[1:], package, *args]),
    )


def _next_app(options: ProjectOptions) -> DelegateStrategy:
    args = [
        options.project_name,
        "--typescript" if options.typescript else "--js",
        "--tailwind" if options.styling is Styling.TAILWIND else "--no-tailwind",
        "--eslint",
        "--app",
        "--no-src-dir",
        "--import-alias",
        "@/*",
        f"--use-{options.package_manager.value}",
        "--disable-git",
        "--yes",
    ]
    if not options.install:
        args.append("--skip-install")
    return DelegateStrategy(
        tool="create-next-app",
        invocation=_exec(options.package_manager, "create-next-app@latest", args),
        installs_dependencies=options.install,
    )


def _vite_app(options: ProjectOptions) -> DelegateStrategy:
    template = "react-ts" if options.typescript else "react"
    args = [options.project_name, "--template", template]
    return DelegateStrategy(
        tool="create-vite",
        invocation=_exec(options.package_manager, "create-vite@latest", args),
        installs_dependencies=False,
    )


def _t3_app(options: ProjectOptions) -> DelegateStrategy:
    args = [options.project_name, "--CI"]
    if options.styling is Styling.TAILWIND:
        args.append("--tailwind")
    args.extend(["--trpc", "--prisma", "--nextAuth", "--appRouter", "--noGit"])
    if not options.install:
        args.append("--noInstall")
    return DelegateStrategy(
        tool="create-t3-app",
        invocation=_exec(options.package_manager, "create-t3-app@latest", args),
        installs_dependencies=options.install,
    )


def _expo_app(options: ProjectOptions) -> DelegateStrategy:
    template = options.expo_template.value if options.expo_template else "tabs"
    args = [options.project_name, "--template", template, "--yes"]
    if not options.install:
        args.append("--no-install")
    return DelegateStrategy(
        tool="create-expo-app",
        invocation=_exec(options.package_manager, "create-expo-app@latest", args),
        installs_dependencies=options.install,
    )


_DELEGATES = {
    Stack.NEXTJS: _next_app,
    Stack.REACT_VITE: _vite_app,
    Stack.T3: _t3_app,
    Stack.EXPO: _expo_app,
}

_ASSEMBLED: dict[Stack, AssembleStrategy] = {
    Stack.EXPRESS_API: AssembleStrategy(profile="express"),
    Stack.NESTJS_API: AssembleStrategy(profile="nest"),
    Stack.MERN: AssembleStrategy(profile="mern", install_dirs=(".", "server", "client")),
}


def select_strategy(options: ProjectOptions) -> Strategy:
    """Return the generation strategy for ``options.stack``.

    Raises:
        LookupError: If the stack has no strategy, which means this table
            is out of date with :class:`Stack`.
    """
    if options.stack in _DELEGATES:
        return _DELEGATES[options.stack](options)
    if options.stack in _ASSEMBLED:
        return _ASSEMBLED[options.stack]
    raise LookupError(f"No generation strategy registered for stack {options.stack.value!r}")


def secondary_tools(options: ProjectOptions) -> list[ToolInvocation]:
    """Commands run inside the new project after dependencies are installed."""
    pm = options.package_manager
    tools: list[ToolInvocation] = []
    if options.shadcn:
        tools.append(_exec(pm, "shadcn@latest", ["init", "-y", "--defaults"]))
    if options.stack is Stack.EXPO and options.styling is Styling.TAILWIND:
        tools.append(ToolInvocation(
            name="nativewind",
            command="npx",
            args=("expo", "install", "nativewind", "tailwindcss",
                  "react-native-reanimated", "react-native-safe-area-context"),
        ))
    return tools


def describe_stacks() -> list[tuple[Stack, str]]:
    """``(stack, how it is generated)`` rows for the ``stacks`` command."""
    rows: list[tuple[Stack, str]] = []
    for stack in Stack:
        if stack in _DELEGATES:
            sample = ProjectOptions(project_name="app", stack=stack)
            rows.append((stack, f"delegates to {_DELEGATES[stack](sample).tool}"))
        else:
            rows.append((stack, f"assembled ({_ASSEMBLED[stack].profile} templates)"))
    return rows
