"""Closing report shown after a project has been created.

The report is derived from the same ``ProjectOptions`` the generator used, so
ports, paths and commands in it always match the generated project.  Rendering
is pure and returns plain text; the CLI wraps it in a Rich panel.
"""

from __future__ import annotations

from pathlib import Path

from shipwright.options import Database, ProjectOptions, Stack, Styling
from shipwright.scaffolder import server_options
from shipwright.selector import secondary_tools

#: Manifest script that starts the development server.
DEV_SCRIPTS: dict[Stack, str] = {
    Stack.NEXTJS: "dev",
    Stack.T3: "dev",
    Stack.REACT_VITE: "dev",
    Stack.MERN: "dev",
    Stack.EXPRESS_API: "dev",
    Stack.NESTJS_API: "start:dev",
    Stack.EXPO: "start",
}


def _urls(options: ProjectOptions) -> list[tuple[str, str]]:
    port = options.dev_port
    if options.stack is Stack.MERN:
        server = f"http://localhost:{server_options(options).dev_port}"
        urls = [("App", f"http://localhost:{port}"), ("API", server), ("Health", f"{server}/health")]
        if options.docs_path:
            urls.append(("API docs", f"{server}{options.docs_path}"))
        return urls
    if options.stack is Stack.EXPO:
        return [("Metro bundler", f"http://localhost:{port}")]

    base = f"http://localhost:{port}"
    urls = [("App" if options.stack.is_frontend else "API", base)]
    if options.health_path:
        urls.append(("Health", f"{base}{options.health_path}"))
    if options.docs_path:
        urls.append(("API docs", f"{base}{options.docs_path}"))
    return urls


def _next_steps(options: ProjectOptions) -> list[str]:
    pm = options.package_manager
    server_dir = "server/" if options.stack is Stack.MERN else ""
    steps = [f"cd {options.project_name}"]

    if not options.install:
        steps.append(" ".join(pm.install_args))
        if options.stack is Stack.MERN:
            steps.append(f"(cd server && {' '.join(pm.install_args)})")
            steps.append(f"(cd client && {' '.join(pm.install_args)})")

    if options.stack.has_server:
        steps.append(f"cp {server_dir}.env.example {server_dir}.env")
    if options.database.uses_prisma:
        migrate = f"{' '.join(pm.exec_prefix)} prisma migrate dev --name init"
        steps.append(f"(cd server && {migrate})" if server_dir else migrate)

    steps.append(pm.run(DEV_SCRIPTS[options.stack]))
    return steps


def _caveats(options: ProjectOptions) -> list[str]:
    notes: list[str] = []
    pm = options.package_manager

    if not options.install:
        notes.append("Dependencies were not installed; run the install command first.")
        for tool in secondary_tools(options):
            notes.append(f"Then run `{tool.display}` to finish setting up {tool.name}.")
    if options.database.uses_prisma:
        notes.append(
            "Prisma: run `prisma generate` after editing prisma/schema.prisma and "
            "`prisma migrate dev` to apply it."
        )
    if options.database.family in ("postgresql", "mongodb"):
        label = "PostgreSQL" if options.database.family == "postgresql" else "MongoDB"
        hint = " (`docker compose up -d` starts one)" if options.include_container else ""
        notes.append(f"{label} must be running before the server starts{hint}.")
    if options.database is Database.SQLITE_RAW:
        notes.append("better-sqlite3 compiles a native module; a C toolchain is needed on install.")
    if options.needs_auth_files:
        notes.append("Set JWT_SECRET in .env to at least 32 random characters.")
    if options.include_container:
        where = " from server/" if options.stack is Stack.MERN else ""
        notes.append(f"Containers: `docker compose up --build`{where} builds and runs the API.")
    if options.stack is Stack.REACT_VITE and options.styling is Styling.TAILWIND:
        notes.append(
            "create-vite does not set up Tailwind; add `tailwindcss` and `@tailwindcss/vite` "
            "and register the plugin in vite.config."
        )
    if options.stack is Stack.REACT_VITE and options.styling is Styling.STYLED_COMPONENTS:
        notes.append(f"Add styled-components with `{pm.value} add styled-components`.")
    if options.stack is Stack.NEXTJS and options.styling is Styling.STYLED_COMPONENTS:
        notes.append(
            "styled-components needs `compiler: { styledComponents: true }` in next.config "
            "and a style registry for the App Router."
        )
    if options.shadcn:
        notes.append("shadcn/ui is initialised; add components with "
                     f"`{' '.join(pm.exec_prefix)} shadcn@latest add button`.")
    if options.stack is Stack.EXPO and options.styling is Styling.TAILWIND:
        notes.append(
            "NativeWind is installed; add the babel preset and tailwind.config.js "
            "as described in the NativeWind docs."
        )
    if not options.git:
        notes.append("Git was not initialised (--no-git).")
    return notes


def render_report(options: ProjectOptions, project_path: str | Path) -> str:
    """Plain-text report for a project created from *options* at *project_path*."""
    lines = [
        f"{options.stack.label} project {options.project_name} is ready.",
        "",
        f"Location: {Path(project_path)}",
    ]
    if options.has_database:
        lines.append(f"Database: {options.database.label}")

    lines += ["", "Next steps:"]
    lines += [f"  {step}" for step in _next_steps(options)]

    lines += [""]
    lines += [f"{label}: {url}" for label, url in _urls(options)]

    caveats = _caveats(options)
    if caveats:
        lines += ["", "Notes:"]
        lines += [f"  - {note}" for note in caveats]

    return "\n".join(lines)
