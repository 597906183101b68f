"""Project scaffolding: renders assembled stacks from Jinja2 templates.

Exports:
    ProjectGenerator: Renders the file list of an Express, Nest or MERN project.
    GeneratedFile: One rendered file and its role.
    GenerationError: Raised when a tree cannot be produced or written.
    TemplateRenderer: Thin Jinja2 wrapper over the bundled templates.
"""

from shipwright.scaffolder.files import FileKind, GeneratedFile, GenerationError
from shipwright.scaffolder.generator import ProjectGenerator, client_options, server_options
from shipwright.scaffolder.steps import EMISSION_STEPS, EmissionStep, StepName, active_steps
from shipwright.scaffolder.templates import TemplateRenderer

__all__ = [
    "EMISSION_STEPS",
    "EmissionStep",
    "FileKind",
    "GeneratedFile",
    "GenerationError",
    "ProjectGenerator",
    "StepName",
    "TemplateRenderer",
    "active_steps",
    "client_options",
    "server_options",
]
