"""The unit of generator output: one file, its contents and what it is."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileKind(str, Enum):
    """Role of a generated file in the project."""
    MANIFEST = "manifest"
    SOURCE = "source"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    ENV_TEMPLATE = "environment-template"


class GenerationError(Exception):
    """Raised when a project tree cannot be produced or written.

    The destination may contain a partial tree when this is raised by a
    delegated generator; assembled trees are staged and never partially
    moved into place.
    """

    def __init__(self, message: str, path: str = "", detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(message)


class GeneratedFile(BaseModel):
    """A file the generator wants written, relative to the project root."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="POSIX path relative to the project root")
    content: str
    kind: FileKind

    @field_validator("path")
    @classmethod
    def _relative_posix(cls, value: str) -> str:
        pure = PurePosixPath(value)
        if not value or pure.is_absolute() or ".." in pure.parts:
            raise ValueError(f"generated file path must be relative and inside the project: {value!r}")
        return str(pure)

    def under(self, prefix: str) -> "GeneratedFile":
        """The same file moved below *prefix* (``server/``, ``client/``)."""
        return GeneratedFile(
            path=str(PurePosixPath(prefix) / self.path), content=self.content, kind=self.kind
        )
