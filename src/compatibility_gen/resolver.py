"""Map package identifiers to source directories."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from compatibility_gen._shared.logging import get_logger
from compatibility_gen._shared.process import ProcessRunner, ToolExecutionError
from compatibility_gen._shared.settings import CompatibilitySettings, get_settings
from compatibility_gen.errors import PackageResolutionError

__all__ = [
    "DirectoryResolver",
    "GoListResolver",
    "PackageResolver",
]

LOGGER = get_logger(__name__)


@runtime_checkable
class PackageResolver(Protocol):
    """Resolve a package identifier to the directory holding its sources."""

    def resolve(self, package: str) -> Path: ...


@dataclass(slots=True)
class GoListResolver:
    """Resolve Go import paths with ``go list -f '{{ .Dir }}'``."""

    runner: ProcessRunner = field(default_factory=ProcessRunner)
    settings: CompatibilitySettings = field(default_factory=get_settings)
    cwd: Path | None = None

    def resolve(self, package: str) -> Path:
        """Return the source directory of ``package``.

        Raises
        ------
        PackageResolutionError
            If ``go list`` cannot run, fails, or prints nothing.
        """
        command = [self.settings.go_executable, "list", "-f", "{{ .Dir }}", package]
        try:
            result = self.runner.run(
                command, cwd=self.cwd, timeout=self.settings.resolve_timeout
            )
        except ToolExecutionError as exc:
            LOGGER.exception(
                "Unable to run go list for %s",
                package,
                extra={"operation": "resolve_package", "package": package},
            )
            raise PackageResolutionError(package, str(exc)) from exc
        if result.returncode != 0:
            output = (result.stderr or result.stdout).strip()
            LOGGER.error(
                "%s",
                output,
                extra={
                    "operation": "resolve_package",
                    "package": package,
                    "returncode": result.returncode,
                },
            )
            raise PackageResolutionError(
                package, output or f"go list exited with status {result.returncode}"
            )
        directory = result.stdout.strip()
        if not directory:
            raise PackageResolutionError(package, "go list returned no directory")
        LOGGER.debug(
            "Resolved %s to %s",
            package,
            directory,
            extra={"operation": "resolve_package", "package": package},
        )
        return Path(directory)


@dataclass(frozen=True, slots=True)
class DirectoryResolver:
    """Treat package identifiers as filesystem paths, optionally relative to ``root``."""

    root: Path | None = None

    def resolve(self, package: str) -> Path:
        """Return ``package`` as a directory path.

        Raises
        ------
        PackageResolutionError
            If the path is not an existing directory.
        """
        candidate = Path(package)
        if self.root is not None and not candidate.is_absolute():
            candidate = self.root / candidate
        if not candidate.is_dir():
            raise PackageResolutionError(package, f"{candidate} is not a directory")
        return candidate
