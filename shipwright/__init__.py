"""Shipwright -- scaffold starter projects from a single set of answers.

Shipwright turns a validated ``ProjectOptions`` object into a project on disk,
either by delegating to an ecosystem generator (``create-next-app``,
``create-vite``, ``create-t3-app``, ``create-expo-app``) or by rendering every
file itself from Jinja2 templates.  Dependency installation, secondary tool
setup and git initialisation follow, and a stack-specific report closes the
run.

Quick usage::

    from shipwright import ScaffoldPipeline, Settings, build_options

    options = build_options({"project_name": "my-api", "stack": "express-api"})
    result = await ScaffoldPipeline(options, Settings.from_env()).run()
    print(result.report)
"""

from shipwright.config import Settings
from shipwright.options import ConfigurationError, ProjectOptions, build_options
from shipwright.pipeline import ScaffoldPipeline

__version__ = "0.4.0"

__all__ = [
    "ConfigurationError",
    "ProjectOptions",
    "ScaffoldPipeline",
    "Settings",
    "build_options",
    "__version__",
]
