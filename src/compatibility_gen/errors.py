"""Typed exception hierarchy with Problem Details support.

Every failure that stops a run derives from :class:`CompatibilityGenError`,
which carries a stable :class:`ErrorCode` and converts to an RFC 9457 Problem
Details payload for the command line.

Examples
--------
>>> from compatibility_gen.errors import PolicyViolationError, PolicyRule
>>> try:
...     raise PolicyViolationError(
...         "Foo", PolicyRule.LEVEL_OR_INTERNAL_REQUIRED, "level or internal must be specified"
...     )
... except PolicyViolationError as e:
...     assert str(e) == "Foo: level or internal must be specified"
...     details = e.to_problem_details()
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, cast

from compatibility_gen._shared.problem_details import (
    BASE_TYPE_URI,
    ProblemDetailsParams,
    build_problem_details,
)

if TYPE_CHECKING:
    from compatibility_gen._shared.problem_details import JsonValue, ProblemDetailsDict

__all__ = [
    "CompatibilityGenError",
    "ErrorCode",
    "MalformedTagError",
    "PackageResolutionError",
    "PersistError",
    "PolicyRule",
    "PolicyViolationError",
    "SourceParseError",
    "get_type_uri",
]


class ErrorCode(StrEnum):
    """Stable error codes used in Problem Details payloads."""

    POLICY_VIOLATION = "policy-violation"
    MALFORMED_TAG = "malformed-tag"
    SOURCE_PARSE_ERROR = "source-parse-error"
    PACKAGE_RESOLUTION_FAILED = "package-resolution-failed"
    PERSIST_FAILED = "persist-failed"


def get_type_uri(code: ErrorCode) -> str:
    """Return the Problem Details type URI for ``code``."""
    return f"{BASE_TYPE_URI}:{code.value}"


class PolicyRule(StrEnum):
    """Rules of the compatibility policy matrix, in evaluation order."""

    LEVEL_OR_INTERNAL_REQUIRED = "level-or-internal-required"
    INTERNAL_REQUIRES_LEVEL_4 = "internal-requires-level-4"
    UNCLASSIFIED_MUST_BE_INTERNAL = "unclassified-must-be-internal"
    GA_REQUIRES_LEVEL_1 = "ga-requires-level-1"
    PRERELEASE_LEVEL_TOO_STRONG = "prerelease-level-too-strong"
    PRERELEASE_LEVEL_TOO_WEAK = "prerelease-level-too-weak"
    EXPERIMENTAL_REQUIRES_LEVEL_4 = "experimental-requires-level-4"


class CompatibilityGenError(Exception):
    """Base exception for all compatibility-gen errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Stable error code.
    status : int, optional
        Status used in the Problem Details payload. Defaults to 500.
    context : Mapping[str, object] | None, optional
        Additional structured context. Defaults to None.
    """

    http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        status: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        if status is not None:
            self.http_status = status
        self.context: dict[str, object] = dict(context) if context else {}

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetailsDict:
        """Convert to an RFC 9457 Problem Details payload.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the specific occurrence. Defaults to None.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetailsDict
            Problem Details payload including ``code`` and the error context.
        """
        extensions: dict[str, JsonValue] = {"code": self.code.value}
        for key, value in self.context.items():
            extensions[key] = cast("JsonValue", str(value) if isinstance(value, Path) else value)
        return build_problem_details(
            ProblemDetailsParams(
                type=get_type_uri(self.code),
                title=title or self.__class__.__name__,
                status=self.http_status,
                detail=self.message,
                instance=instance or "urn:compatibility-gen:error",
                extensions=extensions,
            )
        )

    def __str__(self) -> str:
        return self.message


class PolicyViolationError(CompatibilityGenError):
    """A declaration's tags contradict the compatibility policy matrix."""

    def __init__(self, type_name: str, rule: PolicyRule, explanation: str) -> None:
        super().__init__(
            f"{type_name}: {explanation}",
            code=ErrorCode.POLICY_VIOLATION,
            status=422,
            context={"type_name": type_name, "rule": rule.value},
        )
        self.type_name = type_name
        self.rule = rule


class MalformedTagError(CompatibilityGenError):
    """A compatibility tag carries a value that cannot be interpreted."""

    def __init__(self, type_name: str, tag: str, value: str, reason: str) -> None:
        super().__init__(
            f"{type_name}: invalid value {value!r} for +{tag} tag: {reason}",
            code=ErrorCode.MALFORMED_TAG,
            status=422,
            context={"type_name": type_name, "tag": tag, "value": value},
        )
        self.type_name = type_name
        self.tag = tag
        self.value = value


class SourceParseError(CompatibilityGenError):
    """Go source could not be split into declarations."""

    def __init__(self, message: str, *, path: Path | None = None, line: int | None = None) -> None:
        location = ""
        if path is not None:
            location = f"{path}:{line}: " if line is not None else f"{path}: "
        elif line is not None:
            location = f"line {line}: "
        super().__init__(
            f"{location}{message}",
            code=ErrorCode.SOURCE_PARSE_ERROR,
            status=422,
            context={"path": path, "line": line},
        )
        self.path = path
        self.line = line


class PackageResolutionError(CompatibilityGenError):
    """A package identifier could not be mapped to a source directory."""

    def __init__(self, package: str, reason: str) -> None:
        super().__init__(
            f"unable to resolve package {package}: {reason}",
            code=ErrorCode.PACKAGE_RESOLUTION_FAILED,
            context={"package": package},
        )
        self.package = package


class PersistError(CompatibilityGenError):
    """Rewritten Go source could not be written back to disk."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(
            f"unable to write {path}: {reason}",
            code=ErrorCode.PERSIST_FAILED,
            context={"path": path},
        )
        self.path = path
