"""Turn raw answers (CLI flags, a JSON file, a dict from a caller) into options.

Every problem found is collected and raised together as one
:class:`ConfigurationError`, so the user can fix all of them in one go.
Options that do not apply to the chosen stack are dropped rather than
rejected; contradictions are rejected.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, TypeVar

from shipwright.options.models import (
    ConfigurationError,
    Database,
    ExpoTemplate,
    PackageManager,
    ProjectOptions,
    Stack,
    Styling,
)
from shipwright.options.validation import validate_project_name

E = TypeVar("E", bound=Enum)

#: (database family, use ORM/ODM) -> Database
DATABASE_CHOICES: dict[tuple[str, bool], Database] = {
    ("postgresql", True): Database.POSTGRESQL_PRISMA,
    ("postgresql", False): Database.POSTGRESQL_RAW,
    ("mongodb", True): Database.MONGODB_MONGOOSE,
    ("mongodb", False): Database.MONGODB_RAW,
    ("sqlite", True): Database.SQLITE_PRISMA,
    ("sqlite", False): Database.SQLITE_RAW,
    ("none", True): Database.NONE,
    ("none", False): Database.NONE,
}

DATABASE_FAMILIES = ("postgresql", "mongodb", "sqlite", "none")

#: Databases a stack accepts; stacks absent here take no database at all.
STACK_DATABASES: dict[Stack, frozenset[Database]] = {
    Stack.EXPRESS_API: frozenset(Database),
    Stack.NESTJS_API: frozenset(Database),
    Stack.MERN: frozenset({Database.NONE, Database.MONGODB_MONGOOSE, Database.MONGODB_RAW}),
}

DEFAULT_DATABASE: dict[Stack, Database] = {
    Stack.MERN: Database.MONGODB_MONGOOSE,
}

#: Styling choices a stack accepts and the one used when none is given.
STACK_STYLINGS: dict[Stack, tuple[frozenset[Styling], Optional[Styling]]] = {
    Stack.NEXTJS: (frozenset(Styling), Styling.TAILWIND),
    Stack.T3: (frozenset({Styling.TAILWIND, Styling.CSS_MODULES}), Styling.TAILWIND),
    Stack.REACT_VITE: (frozenset(Styling), Styling.TAILWIND),
    Stack.MERN: (frozenset(Styling), Styling.TAILWIND),
    Stack.EXPO: (frozenset({Styling.TAILWIND}), None),
}

SHADCN_STACKS = frozenset({Stack.NEXTJS, Stack.T3})
JAVASCRIPT_STACKS = frozenset({Stack.NEXTJS, Stack.REACT_VITE})

# Alternative spellings accepted in raw answers.
_ALIASES: dict[str, str] = {
    "name": "project_name",
    "projectName": "project_name",
    "auth": "include_auth",
    "includeAuth": "include_auth",
    "docs": "include_api_docs",
    "swagger": "include_api_docs",
    "includeApiDocs": "include_api_docs",
    "includeSwagger": "include_api_docs",
    "docker": "include_container",
    "includeDocker": "include_container",
    "includeContainer": "include_container",
    "pm": "package_manager",
    "packageManager": "package_manager",
    "useOrm": "use_orm",
    "expoTemplate": "expo_template",
}


def _normalise_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in raw.items()}


def _parse_enum(enum_cls: type[E], value: Any, field: str, reasons: list[str]) -> Optional[E]:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        reasons.append(f"{field} '{value}' is not one of: {choices}")
        return None


_TRUE_WORDS = frozenset({"true", "yes", "y", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "n", "off", "0", ""})


def _parse_bool(value: Any, field: str, reasons: list[str], default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
    reasons.append(f"{field} '{value}' is not a yes/no value")
    return default


def resolve_database(value: Any, use_orm: bool = True) -> Database:
    """Combine a database family and the ORM answer into a :class:`Database`.

    Already-combined values (``"postgresql-raw"``) pass through unchanged.

    Raises:
        ValueError: If *value* is neither a family nor a combined value.
    """
    if isinstance(value, Database):
        return value
    text = str(value).strip().lower() if value is not None else "none"
    if text in DATABASE_FAMILIES:
        return DATABASE_CHOICES[(text, bool(use_orm))]
    return Database(text)


def build_options(raw: Mapping[str, Any]) -> ProjectOptions:
    """Validate *raw* answers and return immutable :class:`ProjectOptions`.

    Raises:
        ConfigurationError: With one reason per problem found.
    """
    answers = _normalise_keys(raw)
    reasons: list[str] = []

    name = answers.get("project_name")
    name = "" if name is None else str(name)
    reasons.extend(f"project name '{name}': {issue}" for issue in validate_project_name(name))

    stack: Optional[Stack] = None
    if answers.get("stack") is None:
        reasons.append("stack is required")
    else:
        stack = _parse_enum(Stack, answers["stack"], "stack", reasons)

    package_manager = _parse_enum(
        PackageManager, answers.get("package_manager", "npm"), "package manager", reasons
    )

    if stack is None or package_manager is None:
        raise ConfigurationError(reasons)

    database = _build_database(stack, answers, reasons)
    styling = _build_styling(stack, answers, reasons)

    include_auth = _parse_bool(answers.get("include_auth"), "auth", reasons)
    include_api_docs = _parse_bool(answers.get("include_api_docs"), "api docs", reasons)
    include_container = _parse_bool(answers.get("include_container"), "docker", reasons)
    typescript = _parse_bool(answers.get("typescript"), "typescript", reasons, default=True)
    shadcn = _parse_bool(answers.get("shadcn"), "shadcn", reasons)
    git = _parse_bool(answers.get("git"), "git", reasons, default=True)
    install = _parse_bool(answers.get("install"), "install", reasons, default=True)
    if not stack.has_server:
        include_auth = include_api_docs = include_container = False
    elif include_auth and database is Database.NONE:
        reasons.append(
            f"authentication needs a database to store users; "
            f"choose a database for {stack.value} or disable auth"
        )

    typescript = typescript if stack in JAVASCRIPT_STACKS else True
    shadcn = (
        shadcn
        and stack in SHADCN_STACKS
        and styling is Styling.TAILWIND
    )

    expo_template: Optional[ExpoTemplate] = None
    if stack is Stack.EXPO:
        expo_template = _parse_enum(
            ExpoTemplate, answers.get("expo_template") or "tabs", "expo template", reasons
        )

    if reasons:
        raise ConfigurationError(reasons)

    return ProjectOptions(
        project_name=name,
        stack=stack,
        database=database,
        include_auth=include_auth,
        include_api_docs=include_api_docs,
        include_container=include_container,
        styling=styling,
        package_manager=package_manager,
        git=git,
        install=install,
        typescript=typescript,
        shadcn=shadcn,
        expo_template=expo_template,
    )


def _build_database(stack: Stack, answers: dict[str, Any], reasons: list[str]) -> Database:
    allowed = STACK_DATABASES.get(stack)
    if allowed is None:
        return Database.NONE

    use_orm = _parse_bool(answers.get("use_orm"), "use ORM", reasons, default=True)
    value = answers.get("database")
    if value is None:
        return DEFAULT_DATABASE.get(stack, Database.NONE)
    try:
        database = resolve_database(value, use_orm)
    except ValueError:
        choices = ", ".join([*DATABASE_FAMILIES, *(db.value for db in Database)])
        reasons.append(f"database '{value}' is not one of: {choices}")
        return Database.NONE

    if database not in allowed:
        accepted = ", ".join(sorted(db.value for db in allowed))
        reasons.append(f"{stack.value} does not support database '{database.value}' (use {accepted})")
    return database


def _build_styling(stack: Stack, answers: dict[str, Any], reasons: list[str]) -> Optional[Styling]:
    if stack not in STACK_STYLINGS:
        return None
    allowed, default = STACK_STYLINGS[stack]
    value = answers.get("styling")
    if value is None or value == "":
        return default
    styling = _parse_enum(Styling, value, "styling", reasons)
    if styling is not None and styling not in allowed:
        accepted = ", ".join(sorted(s.value for s in allowed))
        reasons.append(f"{stack.value} does not support styling '{styling.value}' (use {accepted})")
    return styling
