"""Container asset generation: Dockerfile, compose file and .dockerignore.

Uses the shared Jinja2 templates under ``common/`` so the Express and Nest
profiles (and the MERN server) produce the same container layout, differing
only in build output, entry file and database service.
"""

from __future__ import annotations

from typing import Any

from shipwright.options import PackageManager
from shipwright.scaffolder.files import FileKind, GeneratedFile
from shipwright.scaffolder.templates import TemplateRenderer

#: (COPY line for the manifest and lockfile, install command)
DOCKER_INSTALL: dict[PackageManager, tuple[str, str]] = {
    PackageManager.NPM: ("COPY package*.json ./", "npm install"),
    PackageManager.PNPM: ("COPY package.json pnpm-lock.yaml* ./", "corepack enable && pnpm install"),
    PackageManager.YARN: ("COPY package.json yarn.lock* ./", "corepack enable && yarn install"),
    PackageManager.BUN: ("COPY package.json bun.lockb* ./", "npm install -g bun && bun install"),
}


class DockerGenerator:
    """Generates the container files for one service."""

    # Template name -> output file name
    _FILES: dict[str, str] = {
        "common/Dockerfile.j2": "Dockerfile",
        "common/docker-compose.yml.j2": "docker-compose.yml",
        "common/dockerignore.j2": ".dockerignore",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def generate_all(self, context: dict[str, Any]) -> list[GeneratedFile]:
        """Render every container file for the service described by *context*.

        Args:
            context: Template rendering context; must carry
                ``package_manager``, ``port``, ``entry_file`` and the
                database keys built by :func:`build_context`.

        Returns:
            One :class:`GeneratedFile` per container asset.
        """
        pm = PackageManager(context["package_manager"])
        copy_line, install = DOCKER_INSTALL[pm]
        docker_ctx = {**context, "docker_copy_manifest": copy_line, "docker_install": install}
        return [
            GeneratedFile(
                path=output_name,
                content=self.renderer.render(template_name, docker_ctx),
                kind=FileKind.CONFIG,
            )
            for template_name, output_name in self._FILES.items()
        ]
