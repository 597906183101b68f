"""Pydantic v2 models for the scaffolding choices.

``ProjectOptions`` is the single value object that drives every later stage:
the selector, the file-tree generator, the pipeline and the report all read
it and none of them may change it.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Stack(str, Enum):
    """Top-level application archetype."""
    NEXTJS = "nextjs"
    T3 = "t3-stack"
    REACT_VITE = "react-vite"
    MERN = "mern-stack"
    EXPRESS_API = "express-api"
    NESTJS_API = "nestjs-api"
    EXPO = "expo-react-native"

    @property
    def label(self) -> str:
        return _STACK_LABELS[self]

    @property
    def has_server(self) -> bool:
        """Whether the generated project contains an HTTP API we write ourselves."""
        return self in (Stack.EXPRESS_API, Stack.NESTJS_API, Stack.MERN)

    @property
    def is_frontend(self) -> bool:
        return self in (Stack.NEXTJS, Stack.T3, Stack.REACT_VITE, Stack.EXPO)


_STACK_LABELS: dict[Stack, str] = {
    Stack.NEXTJS: "Next.js",
    Stack.T3: "T3 Stack",
    Stack.REACT_VITE: "React + Vite",
    Stack.MERN: "MERN Stack",
    Stack.EXPRESS_API: "Express API",
    Stack.NESTJS_API: "NestJS API",
    Stack.EXPO: "Expo (React Native)",
}


class Database(str, Enum):
    """Database engine paired with its access layer."""
    NONE = "none"
    POSTGRESQL_PRISMA = "postgresql-prisma"
    POSTGRESQL_RAW = "postgresql-raw"
    MONGODB_MONGOOSE = "mongodb-mongoose"
    MONGODB_RAW = "mongodb-raw"
    SQLITE_PRISMA = "sqlite-prisma"
    SQLITE_RAW = "sqlite-raw"

    @property
    def family(self) -> Optional[str]:
        """``postgresql``, ``mongodb``, ``sqlite`` or ``None``."""
        if self is Database.NONE:
            return None
        return self.value.split("-", 1)[0]

    @property
    def uses_prisma(self) -> bool:
        return self in (Database.POSTGRESQL_PRISMA, Database.SQLITE_PRISMA)

    @property
    def label(self) -> str:
        if self is Database.NONE:
            return "None"
        family = {"postgresql": "PostgreSQL", "mongodb": "MongoDB", "sqlite": "SQLite"}[
            self.family or ""
        ]
        layer = {
            Database.POSTGRESQL_PRISMA: "Prisma",
            Database.SQLITE_PRISMA: "Prisma",
            Database.MONGODB_MONGOOSE: "Mongoose",
        }.get(self, "native driver")
        return f"{family} ({layer})"


class Styling(str, Enum):
    """Styling approach for frontend stacks."""
    TAILWIND = "tailwind"
    CSS_MODULES = "css-modules"
    STYLED_COMPONENTS = "styled-components"


class ExpoTemplate(str, Enum):
    """Starter layout passed to ``create-expo-app``."""
    TABS = "tabs"
    BLANK = "blank"


class PackageManager(str, Enum):
    """Supported package managers.  Only command strings depend on this."""
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"
    BUN = "bun"

    @property
    def run_prefix(self) -> str:
        """Prefix for running a manifest script (``npm run dev``, ``pnpm dev``)."""
        if self in (PackageManager.NPM, PackageManager.BUN):
            return f"{self.value} run"
        return self.value

    @property
    def exec_prefix(self) -> list[str]:
        """Command that downloads and runs a package binary."""
        return list(_EXEC_PREFIXES[self])

    @property
    def install_args(self) -> list[str]:
        """Full install command as an argument list."""
        return [self.value, "install"]

    def run(self, script: str) -> str:
        return f"{self.run_prefix} {script}"

    def run_in(self, directory: str, script: str) -> str:
        """Run *script* from the manifest in *directory* without changing into it."""
        return _RUN_IN[self].format(dir=directory, script=script)


_EXEC_PREFIXES: dict[PackageManager, tuple[str, ...]] = {
    PackageManager.NPM: ("npx",),
    PackageManager.PNPM: ("pnpm", "dlx"),
    PackageManager.YARN: ("yarn", "dlx"),
    PackageManager.BUN: ("bunx",),
}

_RUN_IN: dict[PackageManager, str] = {
    PackageManager.NPM: "npm run {script} --prefix {dir}",
    PackageManager.PNPM: "pnpm --dir {dir} {script}",
    PackageManager.YARN: "yarn --cwd {dir} {script}",
    PackageManager.BUN: "bun --cwd {dir} run {script}",
}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigurationError(Exception):
    """Raised when the requested options are invalid or contradictory.

    ``reasons`` lists every problem found, each phrased for the user.
    """

    def __init__(self, reasons: list[str]) -> None:
        self.reasons = list(reasons)
        summary = "; ".join(self.reasons) if self.reasons else "invalid configuration"
        super().__init__(summary)


# ---------------------------------------------------------------------------
# Project options
# ---------------------------------------------------------------------------


class ProjectOptions(BaseModel):
    """Validated, immutable scaffolding choices.

    Build instances with :func:`shipwright.options.build_options`; the
    constructor alone does not enforce cross-field rules.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="npm package name and directory name")
    stack: Stack
    database: Database = Field(default=Database.NONE)
    include_auth: bool = Field(default=False, description="JWT register/login endpoints")
    include_api_docs: bool = Field(default=False, description="Swagger / OpenAPI docs")
    include_container: bool = Field(default=False, description="Dockerfile and compose file")
    styling: Optional[Styling] = Field(default=None, description="Frontend stacks only")
    package_manager: PackageManager = Field(default=PackageManager.NPM)
    git: bool = Field(default=True, description="Initialise a repository and commit")
    install: bool = Field(default=True, description="Install dependencies after generation")
    typescript: bool = Field(default=True)
    shadcn: bool = Field(default=False, description="Run shadcn init (Next.js / T3 + Tailwind)")
    expo_template: Optional[ExpoTemplate] = Field(default=None)
    service_of: Optional[Stack] = Field(
        default=None,
        description="Parent multi-service stack when these options describe one service",
    )

    # -- Derived flags -----------------------------------------------------

    @property
    def has_database(self) -> bool:
        return self.database is not Database.NONE

    @property
    def needs_auth_files(self) -> bool:
        return self.include_auth and self.has_database

    @property
    def dev_port(self) -> int:
        """Port the development server listens on."""
        if self.service_of is Stack.MERN:
            return 5000 if self.stack is Stack.EXPRESS_API else 5173
        return _DEV_PORTS[self.stack]

    @property
    def api_prefix(self) -> str:
        """Route prefix of the generated API (empty for frontend stacks)."""
        return "/api" if self.stack.has_server else ""

    @property
    def health_path(self) -> Optional[str]:
        if self.stack is Stack.EXPRESS_API or self.stack is Stack.MERN:
            return "/health"
        if self.stack is Stack.NESTJS_API:
            return "/api/health"
        return None

    @property
    def docs_path(self) -> Optional[str]:
        return "/api/docs" if self.include_api_docs and self.stack.has_server else None

    def derive(self, **changes: object) -> "ProjectOptions":
        """Copy with *changes* applied and re-validated."""
        data = self.model_dump()
        data.update(changes)
        return ProjectOptions.model_validate(data)


_DEV_PORTS: dict[Stack, int] = {
    Stack.NEXTJS: 3000,
    Stack.T3: 3000,
    Stack.REACT_VITE: 5173,
    Stack.MERN: 5173,
    Stack.EXPRESS_API: 3000,
    Stack.NESTJS_API: 3000,
    Stack.EXPO: 8081,
}
