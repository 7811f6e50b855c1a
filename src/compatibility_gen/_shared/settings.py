"""Typed settings for the command line and the package resolver.

The functions in this module provide a thin wrapper around
``pydantic_settings.BaseSettings`` so configuration is loaded from
``COMPAT_GEN_*`` environment variables. Validation errors are surfaced as
:class:`SettingsError` exceptions carrying RFC 9457 Problem Details payloads,
so the command line can fail fast with a structured report.

The annotation core never reads settings; only the resolver and the command
line do.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from compatibility_gen._shared.problem_details import (
    BASE_TYPE_URI,
    JsonValue,
    ProblemDetailsDict,
    ProblemDetailsParams,
    build_problem_details,
)

__all__: Final[list[str]] = [
    "CompatibilitySettings",
    "SettingsError",
    "get_settings",
    "load_settings",
    "reset_settings_cache",
]


class SettingsError(RuntimeError):
    """Raised when typed settings fail validation."""

    def __init__(
        self,
        message: str,
        *,
        problem: ProblemDetailsDict,
        errors: Sequence[dict[str, JsonValue]],
    ) -> None:
        super().__init__(message)
        self.problem = problem
        self.errors: tuple[dict[str, JsonValue], ...] = tuple(errors)


class CompatibilitySettings(BaseSettings):
    """Runtime configuration for resolving packages and reporting progress."""

    model_config = SettingsConfigDict(
        env_prefix="COMPAT_GEN_", case_sensitive=False, extra="ignore"
    )

    go_executable: str = Field(
        default="go",
        description="Go toolchain executable used to resolve import paths with `go list`",
    )
    resolve_timeout: float | None = Field(
        default=120.0,
        description="Seconds to wait for `go list` before giving up; unset disables the timeout",
    )
    log_level: str = Field(default="INFO", description="Logging level for the command line")
    log_json: bool = Field(default=True, description="Emit JSON log lines instead of plain text")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        candidate = str(value).strip().upper()
        if candidate not in logging.getLevelNamesMapping():
            message = f"unknown log level {value!r}"
            raise ValueError(message)
        return candidate

    @field_validator("resolve_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            message = "resolve_timeout must be positive"
            raise ValueError(message)
        return value


_SETTINGS_CACHE: dict[str, CompatibilitySettings] = {}


def load_settings[SettingsT: BaseSettings](
    settings_factory: Callable[[], SettingsT] | type[SettingsT],
) -> SettingsT:
    """Instantiate settings via ``settings_factory`` with structured error handling.

    Parameters
    ----------
    settings_factory : Callable[[], SettingsT] | type[SettingsT]
        Zero-argument callable that returns a ``BaseSettings`` subclass.

    Returns
    -------
    SettingsT
        Validated settings instance.

    Raises
    ------
    SettingsError
        Raised when validation fails; the errors are converted to Problem Details.
    """
    try:
        return settings_factory()
    except ValidationError as exc:
        attr_name: object = getattr(settings_factory, "__name__", None)
        settings_name = (
            attr_name if isinstance(attr_name, str) else settings_factory.__class__.__name__
        )
        error_dicts: tuple[dict[str, JsonValue], ...] = tuple(
            _as_error_dict(err) for err in exc.errors()
        )
        problem = build_problem_details(
            ProblemDetailsParams(
                type=f"{BASE_TYPE_URI}:settings-invalid",
                title="Invalid compatibility-gen settings",
                status=500,
                detail="Failed to load configuration",
                instance=f"urn:compatibility-gen:settings:{settings_name}:invalid",
                extensions={"errors": list(error_dicts), "settings_class": settings_name},
            )
        )
        message = "Failed to load compatibility-gen settings"
        raise SettingsError(message, problem=problem, errors=error_dicts) from exc


def get_settings() -> CompatibilitySettings:
    """Return the cached settings instance populated from environment variables."""
    cached = _SETTINGS_CACHE.get("default")
    if cached is None:
        cached = load_settings(CompatibilitySettings)
        _SETTINGS_CACHE["default"] = cached
    return cached


def reset_settings_cache() -> None:
    """Drop the cached settings so the next lookup re-reads the environment."""
    _SETTINGS_CACHE.clear()


def _as_error_dict(error: object) -> dict[str, JsonValue]:
    if isinstance(error, dict):
        return {str(key): _to_jsonable(value) for key, value in error.items()}
    return {"detail": _to_jsonable(error)}


def _to_jsonable(value: object) -> JsonValue:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {str(key): _to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_jsonable(item) for item in value]
    if isinstance(value, Path):
        return value.as_posix()
    return repr(value)
