"""Insert compatibility level comments into the API types of Go packages.

Files of one Go package are all validated before any of them is written: a
policy violation anywhere in the package leaves the whole package untouched.
Packages are processed in order and each one is written as soon as it
validates, so a failure in a later package does not roll back earlier ones.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Final

from compatibility_gen._shared.logging import get_logger, with_fields
from compatibility_gen.errors import PersistError
from compatibility_gen.gosource import GoFile, GoPackage, parse_dir, render_file
from compatibility_gen.resolver import GoListResolver, PackageResolver
from compatibility_gen.walker import process_file

__all__ = [
    "AUTOGENERATED_PREFIX",
    "IGNORE_AUTOGENERATED_BUILD_TAG",
    "NON_TYPE_FILES",
    "UnitWriter",
    "generate_compatibility_comments",
    "insert_compatibility_level_comments",
    "only_types_files",
    "process_package",
    "remove_ignore_autogenerated_build_tag",
    "write_unit",
]

AUTOGENERATED_PREFIX: Final = "zz_generated"
NON_TYPE_FILES: Final = frozenset({"doc.go", "register.go", "generated.pb.go"})
IGNORE_AUTOGENERATED_BUILD_TAG: Final = "// +build !ignore_autogenerated"

UnitWriter = Callable[[Path, str], None]

LOGGER = get_logger(__name__)


def only_types_files(name: str) -> bool:
    """Return True if a file named ``name`` may contain type definitions."""
    if name.startswith(AUTOGENERATED_PREFIX):
        return False
    return name not in NON_TYPE_FILES


def remove_ignore_autogenerated_build_tag(go_file: GoFile) -> None:
    """Drop the ``// +build !ignore_autogenerated`` line trailing the last declaration."""
    if not go_file.declarations:
        return
    last = go_file.declarations[-1]
    last.end = [line for line in last.end if line != IGNORE_AUTOGENERATED_BUILD_TAG]


def write_unit(path: Path, text: str) -> None:
    """Replace the contents of ``path`` with ``text``.

    Raises
    ------
    PersistError
        If the file cannot be written.
    """
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise PersistError(path, str(exc)) from exc


def process_package(
    package: GoPackage,
    *,
    writer: UnitWriter = write_unit,
    dry_run: bool = False,
) -> list[Path]:
    """Annotate every file of ``package`` and persist the files that changed.

    Parameters
    ----------
    package : GoPackage
        Parsed package; its files are processed in path order.
    writer : UnitWriter, optional
        Callable persisting rendered source. Defaults to :func:`write_unit`.
    dry_run : bool, optional
        Validate and report without writing. Defaults to False.

    Returns
    -------
    list[Path]
        Paths of the files that changed (or would change on a dry run).

    Raises
    ------
    CompatibilityGenError
        The first validation or persistence error; no file of the package is
        written when validation fails.
    """
    logger = with_fields(LOGGER, operation="process_package", package=package.name)
    rendered: list[tuple[Path, str]] = []
    for path, go_file in sorted(package.files.items()):
        if not process_file(go_file):
            continue
        remove_ignore_autogenerated_build_tag(go_file)
        rendered.append((path, render_file(go_file)))

    for path, text in rendered:
        if dry_run:
            logger.info("Would update %s", path, extra={"path": str(path), "status": "dry-run"})
            continue
        writer(path, text)
        logger.info("Updated %s", path, extra={"path": str(path)})
    return [path for path, _ in rendered]


def insert_compatibility_level_comments(
    directory: Path,
    *,
    writer: UnitWriter = write_unit,
    dry_run: bool = False,
) -> list[Path]:
    """Annotate the Go packages found in ``directory``.

    Returns
    -------
    list[Path]
        Paths of the files that changed.
    """
    changed: list[Path] = []
    packages = parse_dir(directory, only_types_files)
    for name in sorted(packages):
        changed.extend(process_package(packages[name], writer=writer, dry_run=dry_run))
    return changed


def generate_compatibility_comments(
    packages: Sequence[str],
    *,
    resolver: PackageResolver | None = None,
    writer: UnitWriter = write_unit,
    dry_run: bool = False,
) -> list[Path]:
    """Add compatibility level comments to the API types of ``packages``.

    Parameters
    ----------
    packages : Sequence[str]
        Package identifiers, Go import paths by default.
    resolver : PackageResolver | None, optional
        Maps identifiers to directories. Defaults to :class:`GoListResolver`.
    writer : UnitWriter, optional
        Callable persisting rendered source.
    dry_run : bool, optional
        Validate and report without writing.

    Returns
    -------
    list[Path]
        Paths of the files that changed, in processing order.

    Raises
    ------
    CompatibilityGenError
        The first error encountered; the run stops there.
    """
    if resolver is None:
        resolver = GoListResolver()
    changed: list[Path] = []
    for package in packages:
        directory = resolver.resolve(package)
        logger = with_fields(LOGGER, operation="generate", package=package)
        logger.info("Processing %s", directory, extra={"status": "started"})
        updated = insert_compatibility_level_comments(directory, writer=writer, dry_run=dry_run)
        logger.info(
            "Processed %s: %d file(s) changed",
            directory,
            len(updated),
            extra={"changed": len(updated)},
        )
        changed.extend(updated)
    return changed
