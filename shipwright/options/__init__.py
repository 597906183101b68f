"""Scaffolding options: the validated value object every stage reads."""

from shipwright.options.builder import DATABASE_CHOICES, build_options, resolve_database
from shipwright.options.models import (
    ConfigurationError,
    Database,
    ExpoTemplate,
    PackageManager,
    ProjectOptions,
    Stack,
    Styling,
)
from shipwright.options.validation import NameIssue, NameProblem, validate_project_name

__all__ = [
    "ConfigurationError",
    "DATABASE_CHOICES",
    "Database",
    "ExpoTemplate",
    "NameIssue",
    "NameProblem",
    "PackageManager",
    "ProjectOptions",
    "Stack",
    "Styling",
    "build_options",
    "resolve_database",
    "validate_project_name",
]
