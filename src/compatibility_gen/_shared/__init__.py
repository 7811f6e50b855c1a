"""Shared infrastructure: logging, settings, subprocess execution and Problem Details."""

from __future__ import annotations

from compatibility_gen._shared.logging import (
    JsonFormatter,
    LoggerAdapter,
    get_logger,
    setup_logging,
    with_fields,
)
from compatibility_gen._shared.problem_details import (
    JsonValue,
    ProblemDetailsDict,
    ProblemDetailsParams,
    build_problem_details,
    render_problem,
)
from compatibility_gen._shared.process import ProcessRunner, ToolExecutionError, ToolRunResult
from compatibility_gen._shared.settings import (
    CompatibilitySettings,
    SettingsError,
    get_settings,
    load_settings,
)

__all__ = [
    "CompatibilitySettings",
    "JsonFormatter",
    "JsonValue",
    "LoggerAdapter",
    "ProblemDetailsDict",
    "ProblemDetailsParams",
    "ProcessRunner",
    "SettingsError",
    "ToolExecutionError",
    "ToolRunResult",
    "build_problem_details",
    "get_logger",
    "get_settings",
    "load_settings",
    "render_problem",
    "setup_logging",
    "with_fields",
]
