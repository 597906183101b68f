"""File-tree generation for assembled stacks.

Takes a validated ``ProjectOptions`` and produces the complete list of files
of the project.  Generation is a pure function of the options and the
resolver's version answers: nothing is written until :meth:`write` is called,
and two calls with the same inputs return identical lists.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from jinja2 import TemplateError

from shipwright.options import Database, ProjectOptions, Stack
from shipwright.scaffolder.files import FileKind, GeneratedFile, GenerationError
from shipwright.scaffolder.manifest import (
    MERN_ROOT,
    DependencySet,
    build_manifest,
    mern_root_scripts,
)
from shipwright.scaffolder.profiles import PROFILES, Profile, build_context
from shipwright.scaffolder.steps import active_steps
from shipwright.scaffolder.templates import TemplateRenderer
from shipwright.utils import dump_json
from shipwright.versions import VersionResolver
from shipwright.workspace import FileSystem

#: Single-service stacks and the profile that renders them.
SERVICE_PROFILES: dict[Stack, str] = {
    Stack.EXPRESS_API: "express",
    Stack.NESTJS_API: "nest",
}


def server_options(options: ProjectOptions) -> ProjectOptions:
    """Options of the API service inside a MERN project."""
    return options.derive(
        project_name=f"{options.project_name}-server",
        stack=Stack.EXPRESS_API,
        styling=None,
        shadcn=False,
        service_of=Stack.MERN,
    )


def client_options(options: ProjectOptions) -> ProjectOptions:
    """Options of the React client inside a MERN project."""
    return options.derive(
        project_name=f"{options.project_name}-client",
        stack=Stack.REACT_VITE,
        database=Database.NONE,
        include_auth=False,
        include_api_docs=False,
        include_container=False,
        typescript=True,
        shadcn=False,
        service_of=Stack.MERN,
    )


class ProjectGenerator:
    """Renders the project tree for Express, Nest and MERN stacks.

    Given a ``ProjectOptions``, produces:
    - ``package.json``, TypeScript config and lint/format config
    - entry point, routing, error handling and environment loading
    - database connector and schema (when a database is selected)
    - auth routes, middleware and persistence (when auth is selected)
    - OpenAPI docs setup, Dockerfile and compose file (when selected)
    - README, ``.gitignore``, ``.env.example`` and a first test

    Multi-service stacks compose one generation per service below
    ``server/`` and ``client/`` plus a root manifest, README and
    ``.gitignore``.
    """

    def __init__(self, resolver: VersionResolver, renderer: TemplateRenderer | None = None) -> None:
        self.resolver = resolver
        self.renderer = renderer or TemplateRenderer()
        self.profiles: dict[str, Profile] = {
            name: profile_cls(self.renderer) for name, profile_cls in PROFILES.items()
        }

    # -- Public API --------------------------------------------------------

    def required_packages(self, options: ProjectOptions) -> list[str]:
        """Every package any manifest of the project will declare."""
        return self._dependencies(options).names

    def generate(self, options: ProjectOptions) -> list[GeneratedFile]:
        """Render every file of the project, sorted by path.

        Raises:
            GenerationError: If the stack is not assembled here, a template
                fails to render or two steps emit the same path.
        """
        versions = self.resolver.resolve_all(self.required_packages(options))

        if options.stack is Stack.MERN:
            files = self._generate_mern(options, versions)
        elif options.stack in SERVICE_PROFILES:
            files = self._generate_service(SERVICE_PROFILES[options.stack], options, versions)
        else:
            raise GenerationError(
                f"{options.stack.label} projects are created by their own generator",
                detail=options.stack.value,
            )

        seen: set[str] = set()
        for generated in files:
            if generated.path in seen:
                raise GenerationError("Two generation steps emitted the same file", path=generated.path)
            seen.add(generated.path)

        return sorted(files, key=lambda f: f.path)

    async def write(self, files: list[GeneratedFile], destination: Path, fs: FileSystem) -> Path:
        """Write *files* below *destination*, creating directories as needed."""
        root = Path(destination)
        await fs.ensure_dir(root)
        for generated in files:
            await fs.write_file(root / generated.path, generated.content)
        return root

    # -- Internals ---------------------------------------------------------

    def _dependencies(self, options: ProjectOptions) -> DependencySet:
        if options.stack is Stack.MERN:
            return (
                MERN_ROOT
                | self.profiles["express"].dependencies(server_options(options))
                | self.profiles["react"].dependencies(client_options(options))
            )
        if options.stack in SERVICE_PROFILES:
            return self.profiles[SERVICE_PROFILES[options.stack]].dependencies(options)
        return DependencySet()

    def _generate_service(
        self, profile_name: str, options: ProjectOptions, versions: Mapping[str, str]
    ) -> list[GeneratedFile]:
        profile = self.profiles[profile_name]
        ctx = build_context(options, versions)
        files: list[GeneratedFile] = []
        for step in active_steps(options):
            try:
                files.extend(profile.render_step(step.name, ctx))
            except (TemplateError, KeyError) as exc:
                raise GenerationError(
                    f"Failed to render the {step.name.value} step of {options.project_name}",
                    detail=str(exc),
                ) from exc
        return files

    def _generate_mern(
        self, options: ProjectOptions, versions: Mapping[str, str]
    ) -> list[GeneratedFile]:
        server = self._generate_service("express", server_options(options), versions)
        client = self._generate_service("react", client_options(options), versions)

        ctx = build_context(options, versions)
        ctx["client_port"] = client_options(options).dev_port
        manifest = build_manifest(
            options.project_name,
            f"{ctx['title']} full-stack application",
            MERN_ROOT,
            mern_root_scripts(options.package_manager),
            versions,
        )
        try:
            root = [
                GeneratedFile(path="package.json", content=dump_json(manifest), kind=FileKind.MANIFEST),
                GeneratedFile(
                    path="README.md",
                    content=self.renderer.render("mern/README.md.j2", ctx),
                    kind=FileKind.DOCUMENTATION,
                ),
                GeneratedFile(
                    path=".gitignore",
                    content=self.renderer.render("common/gitignore.j2", ctx),
                    kind=FileKind.CONFIG,
                ),
            ]
        except TemplateError as exc:
            raise GenerationError(
                f"Failed to render the root files of {options.project_name}", detail=str(exc)
            ) from exc

        return (
            root
            + [f.under("server") for f in server]
            + [f.under("client") for f in client]
        )
