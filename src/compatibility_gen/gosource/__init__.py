"""Minimal Go source model: parse files into decorated declarations and print them back."""

from __future__ import annotations

from compatibility_gen.gosource.model import (
    Declaration,
    Field,
    GoFile,
    GoPackage,
    StructType,
    TypeSpec,
)
from compatibility_gen.gosource.parser import parse_dir, parse_file, parse_source
from compatibility_gen.gosource.printer import render_file

__all__ = [
    "Declaration",
    "Field",
    "GoFile",
    "GoPackage",
    "StructType",
    "TypeSpec",
    "parse_dir",
    "parse_file",
    "parse_source",
    "render_file",
]
