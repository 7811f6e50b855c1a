"""Structural model of a Go file: top-level declarations and their decorations."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

__all__ = [
    "Declaration",
    "Field",
    "GoFile",
    "GoPackage",
    "StructType",
    "TypeSpec",
]


@dataclass(frozen=True, slots=True)
class Field:
    """One field of a struct type.

    ``names`` is empty for embedded fields. For embedded fields ``qualifier``
    holds the package selector (``metav1`` in ``metav1.TypeMeta``) and
    ``type_name`` the selected name; ``pointer`` marks ``*T`` embedding.
    """

    names: tuple[str, ...]
    type_expr: str
    tag: str | None = None
    pointer: bool = False
    qualifier: str | None = None
    type_name: str | None = None

    @property
    def embedded(self) -> bool:
        return not self.names


@dataclass(frozen=True, slots=True)
class StructType:
    fields: tuple[Field, ...] = ()


@dataclass(frozen=True, slots=True)
class TypeSpec:
    """The single spec of a ``type Name ...`` declaration."""

    name: str
    struct: StructType | None = None
    alias: bool = False


@dataclass(slots=True)
class Declaration:
    """A top-level declaration.

    ``start`` holds the annotation lines above the declaration and is the only
    part callers are expected to edit. ``end`` holds comment lines trailing the
    last declaration of a file. ``text`` is the declaration source, verbatim.
    """

    keyword: str
    text: str
    start: list[str] = field(default_factory=list)
    end: list[str] = field(default_factory=list)
    space_before: bool = False
    grouped: bool = False
    type_spec: TypeSpec | None = None
    line: int = 0

    @property
    def name(self) -> str | None:
        return self.type_spec.name if self.type_spec is not None else None


@dataclass(slots=True)
class GoFile:
    """A parsed Go source file.

    ``header`` is the verbatim text up to the end of the package clause line.
    ``trailing`` holds comment lines after the package clause of a file
    without declarations.
    """

    path: Path | None
    package: str
    header: str
    declarations: list[Declaration] = field(default_factory=list)
    trailing: list[str] = field(default_factory=list)


@dataclass(slots=True)
class GoPackage:
    """The files of one Go package found in a directory, keyed by path."""

    name: str
    files: dict[Path, GoFile] = field(default_factory=dict)
