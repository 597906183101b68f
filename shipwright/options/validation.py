"""Project-name validation following npm's package-name rules.

A name that fails here would either be rejected by the package manager when
installing or produce an unusable directory, so every problem is reported
before anything touches the disk.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

MAX_NAME_LENGTH = 214

RESERVED_NAMES = frozenset({"node_modules", "favicon.ico"})

NODE_CORE_MODULES = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

_SPECIAL_CHARS_RE = re.compile(r"[~'!()*]")
# Characters encodeURIComponent leaves untouched.
_URL_SAFE = "-_.!~*'()"


class NameProblem(str, Enum):
    """Why a project name was rejected."""
    EMPTY = "empty"
    TOO_LONG = "too-long"
    LEADING_PERIOD = "leading-period"
    LEADING_UNDERSCORE = "leading-underscore"
    SURROUNDING_SPACES = "surrounding-spaces"
    UPPERCASE = "uppercase"
    SPECIAL_CHARACTERS = "special-characters"
    NOT_URL_SAFE = "not-url-safe"
    SCOPED = "scoped"
    RESERVED = "reserved"
    CORE_MODULE = "core-module"


@dataclass(frozen=True)
class NameIssue:
    problem: NameProblem
    message: str

    def __str__(self) -> str:
        return self.message


def validate_project_name(name: str) -> list[NameIssue]:
    """Return every rule *name* breaks; an empty list means it is valid."""
    if not name:
        return [NameIssue(NameProblem.EMPTY, "name length must be greater than zero")]

    issues: list[NameIssue] = []
    if len(name) > MAX_NAME_LENGTH:
        issues.append(NameIssue(
            NameProblem.TOO_LONG,
            f"name can no longer contain more than {MAX_NAME_LENGTH} characters",
        ))
    if name.startswith("."):
        issues.append(NameIssue(NameProblem.LEADING_PERIOD, "name cannot start with a period"))
    if name.startswith("_"):
        issues.append(NameIssue(
            NameProblem.LEADING_UNDERSCORE, "name cannot start with an underscore"
        ))
    if name.strip() != name:
        issues.append(NameIssue(
            NameProblem.SURROUNDING_SPACES, "name cannot contain leading or trailing spaces"
        ))
    if name.lower() != name:
        issues.append(NameIssue(NameProblem.UPPERCASE, "name can no longer contain capital letters"))
    if _SPECIAL_CHARS_RE.search(name):
        issues.append(NameIssue(
            NameProblem.SPECIAL_CHARACTERS,
            "name can no longer contain special characters (\"~'!()*\")",
        ))
    if name.startswith("@") and "/" in name:
        issues.append(NameIssue(
            NameProblem.SCOPED, "scoped names cannot be used as a project directory"
        ))
    elif quote(name, safe=_URL_SAFE) != name:
        issues.append(NameIssue(
            NameProblem.NOT_URL_SAFE, "name can only contain URL-friendly characters"
        ))
    if name.lower() in RESERVED_NAMES:
        issues.append(NameIssue(NameProblem.RESERVED, f"{name} is a reserved name"))
    if name in NODE_CORE_MODULES:
        issues.append(NameIssue(NameProblem.CORE_MODULE, f"{name} is a core module name"))
    return issues
