"""Command line entry point for compatibility-gen."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer

from compatibility_gen._shared.logging import get_logger, setup_logging, with_fields
from compatibility_gen._shared.problem_details import render_problem
from compatibility_gen._shared.process import ToolExecutionError
from compatibility_gen._shared.settings import SettingsError, get_settings
from compatibility_gen.errors import CompatibilityGenError
from compatibility_gen.generator import generate_compatibility_comments
from compatibility_gen.resolver import DirectoryResolver, GoListResolver, PackageResolver

__all__ = [
    "app",
    "generate",
    "main",
]

LOGGER = get_logger(__name__)

app = typer.Typer(
    help="Add compatibility level comments to OpenShift API types.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def _root() -> None:
    """Add compatibility level comments to OpenShift API types."""


@app.command(help="Validate compatibility tags and insert compatibility level comments.")
def generate(
    packages: Annotated[
        list[str],
        typer.Argument(help="Go import paths (or directories with --dir) to process."),
    ],
    directories: Annotated[
        bool,
        typer.Option("--dir", help="Treat arguments as directories instead of import paths."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Report files that would change without writing them."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every API type that is inspected."),
    ] = False,
) -> None:
    """Run the generator over ``packages``.

    Raises
    ------
    typer.Exit
        With code 1 when the run stops on an error.
    """
    try:
        settings = get_settings()
    except SettingsError as exc:
        typer.echo(render_problem(exc.problem), err=True)
        raise typer.Exit(code=1) from exc

    setup_logging("DEBUG" if verbose else settings.log_level, json_format=settings.log_json)
    logger = with_fields(LOGGER, operation="generate")

    resolver: PackageResolver
    if directories:
        resolver = DirectoryResolver(root=Path.cwd())
    else:
        resolver = GoListResolver(settings=settings)

    try:
        changed = generate_compatibility_comments(packages, resolver=resolver, dry_run=dry_run)
    except CompatibilityGenError as exc:
        logger.error("%s", exc, extra={"code": exc.code.value})
        typer.echo(render_problem(exc.to_problem_details()), err=True)
        raise typer.Exit(code=1) from exc
    except ToolExecutionError as exc:
        logger.error("%s", exc)
        if exc.problem is not None:
            typer.echo(render_problem(exc.problem), err=True)
        raise typer.Exit(code=1) from exc

    verb = "would change" if dry_run else "changed"
    for path in changed:
        typer.echo(str(path))
    logger.info("%d file(s) %s", len(changed), verb, extra={"changed": len(changed)})


def main() -> None:
    """Run the command line application."""
    app(prog_name="compatibility-gen")


if __name__ == "__main__":
    sys.exit(main())
