"""Package manifests (``package.json``) for assembled projects.

A manifest's dependency set is the fixed base set of its profile plus one
increment per enabled feature.  Scripts are fixed per profile; the only
thing that varies is the package manager's run prefix in composite scripts.
Versions come from the resolver's answers and are passed in, so building a
manifest is a pure function.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from shipwright.options import Database, PackageManager, ProjectOptions, Styling


@dataclass(frozen=True)
class DependencySet:
    """Runtime and development package names, in declaration order."""

    runtime: tuple[str, ...] = ()
    dev: tuple[str, ...] = ()

    def __or__(self, other: "DependencySet") -> "DependencySet":
        return DependencySet(
            runtime=tuple(dict.fromkeys([*self.runtime, *other.runtime])),
            dev=tuple(dict.fromkeys([*self.dev, *other.dev])),
        )

    @property
    def names(self) -> list[str]:
        return list(dict.fromkeys([*self.runtime, *self.dev]))


EMPTY = DependencySet()

_LINT = DependencySet(dev=("eslint", "@eslint/js", "typescript-eslint", "prettier"))

EXPRESS_BASE = DependencySet(
    runtime=("express", "helmet", "cors", "dotenv", "zod"),
    dev=(
        "typescript", "tsx", "@types/node", "@types/express", "@types/cors",
        "jest", "ts-jest", "@types/jest", "supertest", "@types/supertest",
    ),
) | _LINT

NEST_BASE = DependencySet(
    runtime=(
        "@nestjs/common", "@nestjs/core", "@nestjs/platform-express", "@nestjs/config",
        "class-validator", "class-transformer", "reflect-metadata", "rxjs",
    ),
    dev=(
        "@nestjs/cli", "@nestjs/schematics", "@nestjs/testing", "typescript", "ts-node",
        "ts-loader", "@types/node", "@types/express", "jest", "ts-jest", "@types/jest",
        "supertest", "@types/supertest",
    ),
) | _LINT

CLIENT_BASE = DependencySet(
    runtime=("react", "react-dom"),
    dev=("typescript", "vite", "@vitejs/plugin-react", "@types/react", "@types/react-dom"),
) | _LINT

MERN_ROOT = DependencySet(dev=("concurrently",))

_PRISMA = DependencySet(runtime=("@prisma/client",), dev=("prisma",))
_PG = DependencySet(runtime=("pg",), dev=("@types/pg",))
_MONGODB = DependencySet(runtime=("mongodb",))
_SQLITE = DependencySet(runtime=("better-sqlite3",), dev=("@types/better-sqlite3",))

DATABASE_INCREMENTS: dict[str, dict[Database, DependencySet]] = {
    "express": {
        Database.NONE: EMPTY,
        Database.POSTGRESQL_PRISMA: _PRISMA,
        Database.SQLITE_PRISMA: _PRISMA,
        Database.POSTGRESQL_RAW: _PG,
        Database.MONGODB_MONGOOSE: DependencySet(runtime=("mongoose",)),
        Database.MONGODB_RAW: _MONGODB,
        Database.SQLITE_RAW: _SQLITE,
    },
    "nest": {
        Database.NONE: EMPTY,
        Database.POSTGRESQL_PRISMA: _PRISMA,
        Database.SQLITE_PRISMA: _PRISMA,
        Database.POSTGRESQL_RAW: _PG,
        Database.MONGODB_MONGOOSE: DependencySet(runtime=("@nestjs/mongoose", "mongoose")),
        Database.MONGODB_RAW: _MONGODB,
        Database.SQLITE_RAW: _SQLITE,
    },
}

AUTH_INCREMENTS: dict[str, DependencySet] = {
    "express": DependencySet(
        runtime=("jsonwebtoken", "bcryptjs"),
        dev=("@types/jsonwebtoken", "@types/bcryptjs"),
    ),
    "nest": DependencySet(
        runtime=("@nestjs/passport", "@nestjs/jwt", "passport", "passport-jwt", "bcryptjs"),
        dev=("@types/passport-jwt", "@types/bcryptjs"),
    ),
}

DOCS_INCREMENTS: dict[str, DependencySet] = {
    "express": DependencySet(
        runtime=("swagger-ui-express", "swagger-jsdoc"),
        dev=("@types/swagger-ui-express", "@types/swagger-jsdoc"),
    ),
    "nest": DependencySet(runtime=("@nestjs/swagger",)),
}

STYLING_INCREMENTS: dict[Styling, DependencySet] = {
    Styling.TAILWIND: DependencySet(dev=("tailwindcss", "@tailwindcss/vite")),
    Styling.CSS_MODULES: EMPTY,
    Styling.STYLED_COMPONENTS: DependencySet(runtime=("styled-components",)),
}


def backend_dependencies(profile: str, options: ProjectOptions) -> DependencySet:
    """Base set of *profile* plus the database, auth and docs increments."""
    deps = EXPRESS_BASE if profile == "express" else NEST_BASE
    deps = deps | DATABASE_INCREMENTS[profile][options.database]
    if options.needs_auth_files:
        deps = deps | AUTH_INCREMENTS[profile]
    if options.include_api_docs:
        deps = deps | DOCS_INCREMENTS[profile]
    return deps


def client_dependencies(options: ProjectOptions) -> DependencySet:
    deps = CLIENT_BASE
    if options.styling is not None:
        deps = deps | STYLING_INCREMENTS[options.styling]
    return deps


# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------


def express_scripts(pm: PackageManager) -> dict[str, str]:
    return {
        "dev": "tsx watch src/index.ts",
        "build": "tsc -p tsconfig.build.json",
        "start": "node dist/index.js",
        "test": "jest",
        "test:watch": "jest --watch",
        "lint": "eslint src tests",
        "lint:fix": "eslint src tests --fix",
        "format": 'prettier --write "src/**/*.ts" "tests/**/*.ts"',
        "check": f"{pm.run('lint')} && {pm.run('test')}",
    }


def nest_scripts(pm: PackageManager) -> dict[str, str]:
    return {
        "build": "nest build",
        "start": "nest start",
        "start:dev": "nest start --watch",
        "start:debug": "nest start --debug --watch",
        "start:prod": "node dist/main",
        "test": "jest",
        "test:watch": "jest --watch",
        "test:cov": "jest --coverage",
        "lint": 'eslint "src/**/*.ts"',
        "format": 'prettier --write "src/**/*.ts"',
        "check": f"{pm.run('lint')} && {pm.run('test')}",
    }


def client_scripts(pm: PackageManager) -> dict[str, str]:
    return {
        "dev": "vite",
        "build": "tsc --noEmit && vite build",
        "preview": "vite preview",
        "lint": "eslint src",
        "format": 'prettier --write "src/**/*.{ts,tsx,css}"',
        "check": f"{pm.run('lint')} && {pm.run('build')}",
    }


def mern_root_scripts(pm: PackageManager) -> dict[str, str]:
    server_dev = pm.run_in("server", "dev")
    client_dev = pm.run_in("client", "dev")
    return {
        "dev": f'concurrently -n server,client -c blue,green "{server_dev}" "{client_dev}"',
        "build": f"{pm.run_in('server', 'build')} && {pm.run_in('client', 'build')}",
        "start": pm.run_in("server", "start"),
        "test": pm.run_in("server", "test"),
        "lint": f"{pm.run_in('server', 'lint')} && {pm.run_in('client', 'lint')}",
    }


# ---------------------------------------------------------------------------
# Manifest assembly
# ---------------------------------------------------------------------------


def _pinned(names: tuple[str, ...], versions: Mapping[str, str]) -> dict[str, str]:
    return {name: versions[name] for name in sorted(names)}


def build_manifest(
    name: str,
    description: str,
    deps: DependencySet,
    scripts: dict[str, str],
    versions: Mapping[str, str],
    **extra: Any,
) -> dict[str, Any]:
    """Assemble a ``package.json`` document.

    Raises:
        KeyError: If *versions* lacks an entry for a declared package.
    """
    manifest: dict[str, Any] = {
        "name": name,
        "version": "0.1.0",
        "private": True,
        "description": description,
        "license": "MIT",
    }
    manifest.update({key: value for key, value in extra.items() if key not in ("jest",)})
    manifest["scripts"] = scripts
    if deps.runtime:
        manifest["dependencies"] = _pinned(deps.runtime, versions)
    if deps.dev:
        manifest["devDependencies"] = _pinned(deps.dev, versions)
    manifest["engines"] = {"node": ">=18.18"}
    if "jest" in extra:
        manifest["jest"] = extra["jest"]
    return manifest


NEST_JEST_CONFIG: dict[str, Any] = {
    "moduleFileExtensions": ["js", "json", "ts"],
    "rootDir": "src",
    "testRegex": ".*\\.spec\\.ts$",
    "transform": {"^.+\\.(t|j)s$": "ts-jest"},
    "collectCoverageFrom": ["**/*.(t|j)s"],
    "coverageDirectory": "../coverage",
    "testEnvironment": "node",
}
