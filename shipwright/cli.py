"""Command-line interface.

Usage::

    shipwright new my-api --stack express-api --database postgresql --auth --docs
    shipwright stacks
    shipwright versions --refresh
    python -m shipwright new my-app --stack nextjs --styling tailwind --shadcn
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from rich.panel import Panel
from rich.table import Table

from shipwright import __version__
from shipwright.config import Settings
from shipwright.options import ConfigurationError, ExpoTemplate, PackageManager, Stack, Styling
from shipwright.options import build_options
from shipwright.options.builder import DATABASE_FAMILIES
from shipwright.pipeline import DestinationExistsError, GenerationError, ScaffoldPipeline
from shipwright.selector import describe_stacks
from shipwright.utils import console, print_error, print_success, print_summary_table, print_warning
from shipwright.versions import VersionResolver

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shipwright",
        description="Shipwright -- scaffold web, API and mobile starter projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  shipwright new my-api --stack express-api --database postgresql --auth\n"
            "  shipwright new shop --stack mern-stack --docker\n"
            "  shipwright new site --stack nextjs --styling tailwind --shadcn --pm pnpm\n"
            "  shipwright versions --refresh\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new project")
    new.add_argument("name", help="Project (and npm package) name")
    new.add_argument(
        "--stack", "-s",
        required=True,
        choices=[stack.value for stack in Stack],
        help="Application archetype",
    )
    new.add_argument(
        "--database", "-d",
        choices=list(DATABASE_FAMILIES),
        default=None,
        help="Database family (API and MERN stacks)",
    )
    new.add_argument(
        "--no-orm",
        dest="use_orm",
        action="store_false",
        help="Use the native driver instead of Prisma / Mongoose",
    )
    new.add_argument("--auth", action="store_true", help="JWT register/login endpoints")
    new.add_argument("--docs", action="store_true", help="Swagger / OpenAPI documentation")
    new.add_argument("--docker", action="store_true", help="Dockerfile and compose file")
    new.add_argument(
        "--styling",
        choices=[styling.value for styling in Styling],
        default=None,
        help="Styling approach (frontend stacks)",
    )
    new.add_argument("--shadcn", action="store_true", help="Initialise shadcn/ui (Next.js, T3)")
    new.add_argument(
        "--expo-template",
        choices=[template.value for template in ExpoTemplate],
        default=None,
        help="Starter layout for Expo",
    )
    new.add_argument(
        "--javascript", "--js",
        dest="typescript",
        action="store_false",
        help="JavaScript instead of TypeScript (Next.js, React + Vite)",
    )
    new.add_argument(
        "--pm",
        choices=[pm.value for pm in PackageManager],
        default="npm",
        help="Package manager (default: npm)",
    )
    new.add_argument("--no-git", dest="git", action="store_false", help="Skip git initialisation")
    new.add_argument(
        "--no-install", dest="install", action="store_false", help="Skip dependency installation"
    )
    new.add_argument(
        "--output", "-o",
        default=".",
        help="Directory the project folder is created in (default: current directory)",
    )
    new.add_argument(
        "--offline", action="store_true", help="Never contact the npm registry"
    )

    sub.add_parser("stacks", help="List every stack and how it is generated")

    versions = sub.add_parser("versions", help="Show or maintain the dependency version cache")
    versions.add_argument("packages", nargs="*", metavar="PACKAGE", help="Packages to resolve")
    group = versions.add_mutually_exclusive_group()
    group.add_argument(
        "--refresh", action="store_true", help="Fetch the latest version of every bundled package"
    )
    group.add_argument("--clear", action="store_true", help="Forget every cached version")

    return parser


def answers_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Raw answers for :func:`build_options` from parsed ``new`` arguments."""
    answers: dict[str, Any] = {
        "project_name": args.name,
        "stack": args.stack,
        "use_orm": args.use_orm,
        "include_auth": args.auth,
        "include_api_docs": args.docs,
        "include_container": args.docker,
        "shadcn": args.shadcn,
        "typescript": args.typescript,
        "package_manager": args.pm,
        "git": args.git,
        "install": args.install,
    }
    if args.database is not None:
        answers["database"] = args.database
    if args.styling is not None:
        answers["styling"] = args.styling
    if args.expo_template is not None:
        answers["expo_template"] = args.expo_template
    return answers


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_new(args: argparse.Namespace, settings: Settings) -> int:
    try:
        options = build_options(answers_from_args(args))
    except ConfigurationError as exc:
        print_error("Invalid project options:")
        for reason in exc.reasons:
            console.print(f"  - {reason}")
        return EXIT_USAGE

    if args.offline:
        settings = settings.model_copy(update={"offline": True})

    print_summary_table(
        {
            "Project": options.project_name,
            "Stack": options.stack.label,
            "Database": options.database.label,
            "Auth": "yes" if options.include_auth else "no",
            "API docs": "yes" if options.include_api_docs else "no",
            "Docker": "yes" if options.include_container else "no",
            "Styling": options.styling.value if options.styling else "-",
            "Package manager": options.package_manager.value,
        },
        title="New project",
    )

    pipeline = ScaffoldPipeline(options, settings, parent_dir=Path(args.output))
    try:
        result = asyncio.run(pipeline.run())
    except DestinationExistsError as exc:
        print_error(str(exc))
        return EXIT_USAGE
    except GenerationError as exc:
        print_error(f"Project generation failed: {exc}")
        if exc.detail:
            console.print(f"[dim]{exc.detail}[/dim]")
        return EXIT_FAILED

    for warning in result.warnings:
        print_warning(f"{warning.name}: {warning.detail}")
    console.print(Panel(result.report, title="[bold]Shipwright[/bold]", border_style="green"))
    return EXIT_OK


def cmd_stacks(args: argparse.Namespace, settings: Settings) -> int:
    table = Table(title="Stacks", show_header=True, header_style="bold cyan")
    table.add_column("Stack", no_wrap=True)
    table.add_column("Name")
    table.add_column("Generation")
    for stack, how in describe_stacks():
        table.add_row(stack.value, stack.label, how)
    console.print(table)
    return EXIT_OK


def cmd_versions(args: argparse.Namespace, settings: Settings) -> int:
    resolver = VersionResolver.from_settings(settings)

    if args.clear:
        resolver.clear()
        print_success(f"Version cache cleared ({settings.version_cache_path})")
        return EXIT_OK

    if args.refresh:
        if resolver.offline:
            print_warning("Offline mode: the registry will not be contacted.")
        resolved = asyncio.run(
            resolver.resolve_many(args.packages, force=True)
            if args.packages
            else resolver.prefetch_common(force=True)
        )
    elif args.packages:
        resolved = asyncio.run(resolver.resolve_many(args.packages))
    else:
        resolved = resolver.resolve_all(sorted(resolver.fallback))

    cache = resolver.snapshot()
    table = Table(title="Dependency versions", show_header=True, header_style="bold cyan")
    table.add_column("Package", no_wrap=True)
    table.add_column("Range")
    table.add_column("Source", style="dim")
    for name, version in resolved.items():
        source = "cache" if cache.versions.get(name) == version else "bundled"
        table.add_row(name, version, source)
    console.print(table)

    if cache.last_fetch:
        age_hours = cache.age() / 3600
        console.print(
            f"[dim]Cache last refreshed {age_hours:.1f}h ago ({settings.version_cache_path})[/dim]"
        )
    else:
        console.print("[dim]Cache is empty; bundled versions are in use.[/dim]")
    return EXIT_OK


_COMMANDS = {
    "new": cmd_new,
    "stacks": cmd_stacks,
    "versions": cmd_versions,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``shipwright`` and ``python -m shipwright``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    return _COMMANDS[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
