"""Ordered, independently gated emission steps.

Each step's gate reads only the project options, never the output of other
steps.  Two files whose references depend on the same feature are therefore
emitted by steps behind the same gate and either both exist or neither does.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable

from shipwright.options import ProjectOptions


class StepName(str, Enum):
    MANIFEST = "manifest"
    ENTRY = "entry"
    ENV = "env"
    DATABASE = "database"
    AUTH = "auth"
    API_DOCS = "api-docs"
    CONTAINER = "container"
    GITIGNORE = "gitignore"
    README = "readme"
    TESTS = "tests"
    LINT = "lint"


@dataclass(frozen=True)
class EmissionStep:
    name: StepName
    gate: Callable[[ProjectOptions], bool]
    description: str

    def applies(self, options: ProjectOptions) -> bool:
        return self.gate(options)


def _always(options: ProjectOptions) -> bool:
    return True


EMISSION_STEPS: tuple[EmissionStep, ...] = (
    EmissionStep(StepName.MANIFEST, _always, "package manifest and compiler config"),
    EmissionStep(StepName.ENTRY, _always, "entry point, routing and error handling"),
    EmissionStep(StepName.ENV, _always, "environment loader and .env.example"),
    EmissionStep(StepName.DATABASE, lambda o: o.has_database, "database connector and schema"),
    EmissionStep(StepName.AUTH, lambda o: o.needs_auth_files, "auth middleware, controllers and DTOs"),
    EmissionStep(StepName.API_DOCS, lambda o: o.include_api_docs, "OpenAPI docs setup"),
    EmissionStep(StepName.CONTAINER, lambda o: o.include_container, "Dockerfile and compose file"),
    EmissionStep(StepName.GITIGNORE, _always, ".gitignore"),
    EmissionStep(StepName.README, _always, "README"),
    EmissionStep(StepName.TESTS, _always, "test runner config and a first test"),
    EmissionStep(StepName.LINT, _always, "lint and format config"),
)


def active_steps(options: ProjectOptions) -> list[EmissionStep]:
    """Steps whose gate passes for *options*, in emission order."""
    return [step for step in EMISSION_STEPS if step.applies(options)]
