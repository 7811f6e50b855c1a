"""Subprocess execution adapter.

The only external program the tool runs is the Go toolchain (``go list``).
Callers go through :class:`ProcessRunner` instead of invoking
:mod:`subprocess` directly so executable lookup, environment handling, error
reporting and structured logging live in one place.
"""

from __future__ import annotations

import os
import shutil
import subprocess  # noqa: S404
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from compatibility_gen._shared.logging import get_logger
from compatibility_gen._shared.problem_details import (
    BASE_TYPE_URI,
    ProblemDetailsParams,
    build_problem_details,
)

if TYPE_CHECKING:
    from compatibility_gen._shared.logging import LoggerAdapter
    from compatibility_gen._shared.problem_details import JsonValue, ProblemDetailsDict

Command = Sequence[str]

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ToolRunResult:
    """Structured result from invoking a subprocess."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float
    timed_out: bool


class ToolExecutionError(RuntimeError):
    """Raised when a subprocess fails to execute successfully.

    Parameters
    ----------
    message : str
        Human-readable error message.
    command : Sequence[str]
        Command that failed.
    returncode : int | None, optional
        Process exit code if available.
    streams : tuple[str, str] | None, optional
        ``(stdout, stderr)`` tuple if available.
    problem : ProblemDetailsDict | None, optional
        RFC 9457 Problem Details payload.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int | None = None,
        streams: tuple[str, str] | None = None,
        problem: ProblemDetailsDict | None = None,
    ) -> None:
        super().__init__(message)
        self.command: tuple[str, ...] = tuple(command)
        self.returncode = returncode
        self.stdout, self.stderr = streams if streams is not None else ("", "")
        self.problem = problem


@runtime_checkable
class EnvironmentPolicy(Protocol):
    """Protocol describing how subprocess environments are constructed."""

    def build(self, overrides: Mapping[str, str] | None) -> dict[str, str]: ...


@dataclass(slots=True, frozen=True)
class SanitisedEnvironment(EnvironmentPolicy):
    """Environment policy that keeps baseline and Go toolchain variables."""

    allowed_keys: frozenset[str] = frozenset(
        {
            "HOME",
            "PATH",
            "LANG",
            "LC_ALL",
            "LC_CTYPE",
            "TMPDIR",
            "TZ",
        }
    )
    allowed_prefixes: tuple[str, ...] = ("GO", "CGO_", "XDG_")

    def build(self, overrides: Mapping[str, str] | None) -> dict[str, str]:
        baseline = {
            key: value
            for key, value in os.environ.items()
            if key in self.allowed_keys or key.startswith(self.allowed_prefixes)
        }
        if overrides:
            baseline.update(overrides)
        return {key: str(value) for key, value in baseline.items()}


@dataclass(slots=True)
class ProcessRunner:
    """Facade that executes tooling subprocesses with shared policies."""

    environment: EnvironmentPolicy = field(default_factory=SanitisedEnvironment)
    logger: LoggerAdapter = field(default_factory=lambda: get_logger(__name__))

    def run(
        self,
        command: Command,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        check: bool = False,
    ) -> ToolRunResult:
        """Execute ``command`` and capture its output.

        Raises
        ------
        ToolExecutionError
            When the executable is missing, the command times out, or
            ``check`` is set and the command exits non-zero.
        """
        if not command:
            message = "Command must contain at least one argument"
            raise ToolExecutionError(message, command=[])

        executable = self._resolve(command[0], command)
        final_command = (str(executable), *command[1:])
        sanitised_env = self.environment.build(env)

        self.logger.debug(
            "Running subprocess",
            extra={"operation": "run_tool", "status": "started", "command": list(final_command)},
        )
        started = time.monotonic()
        try:
            completed = subprocess.run(  # noqa: S603
                final_command,
                cwd=str(cwd) if cwd else None,
                env=sanitised_env,
                text=True,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            detail = f"{command[0]} did not finish within {timeout} seconds"
            problem = _tool_problem(
                "tool-timeout", command, status=504, detail=detail, timeout=timeout
            )
            message = "Subprocess timed out"
            raise ToolExecutionError(
                message,
                command=command,
                streams=(_decode_stream(exc.stdout), _decode_stream(exc.stderr)),
                problem=problem,
            ) from exc
        except FileNotFoundError as exc:
            problem = _tool_problem(
                "tool-missing", command, status=500, detail=str(exc), executable=command[0]
            )
            message = "Executable not found"
            raise ToolExecutionError(message, command=command, problem=problem) from exc

        result = ToolRunResult(
            command=final_command,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            duration_seconds=time.monotonic() - started,
            timed_out=False,
        )
        self.logger.debug(
            "Subprocess finished",
            extra={
                "operation": "run_tool",
                "returncode": result.returncode,
                "duration_seconds": result.duration_seconds,
            },
        )

        if check and completed.returncode != 0:
            problem = _tool_problem(
                "tool-failure",
                command,
                status=500,
                detail=completed.stderr.strip() or f"exit status {completed.returncode}",
                returncode=completed.returncode,
            )
            message = "Subprocess returned a non-zero exit status"
            raise ToolExecutionError(
                message,
                command=command,
                returncode=completed.returncode,
                streams=(completed.stdout, completed.stderr),
                problem=problem,
            )
        return result

    @staticmethod
    def _resolve(executable: str, command: Command) -> Path:
        candidate = Path(executable)
        if candidate.is_absolute():
            return candidate
        resolved = shutil.which(executable)
        if resolved is None:
            detail = f"Executable '{executable}' could not be resolved to an absolute path"
            problem = _tool_problem(
                "tool-missing", command, status=500, detail=detail, executable=executable
            )
            raise ToolExecutionError(detail, command=[executable], problem=problem)
        return Path(resolved)


def _tool_problem(
    category: str,
    command: Command,
    *,
    status: int,
    detail: str,
    **extensions: JsonValue,
) -> ProblemDetailsDict:
    """Describe a failed ``command``; ``category`` names the failure kind."""
    tool = Path(command[0]).name if command else "<unknown>"
    return build_problem_details(
        ProblemDetailsParams(
            type=f"{BASE_TYPE_URI}:{category}",
            title=f"{tool} {category.removeprefix('tool-')}",
            status=status,
            detail=detail,
            instance=f"urn:compatibility-gen:tool:{tool}",
            extensions={"command": [str(part) for part in command], **extensions},
        )
    )


def _decode_stream(stream: object) -> str:
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    if stream is None:
        return ""
    return str(stream)


__all__ = [
    "EnvironmentPolicy",
    "ProcessRunner",
    "SanitisedEnvironment",
    "ToolExecutionError",
    "ToolRunResult",
]
