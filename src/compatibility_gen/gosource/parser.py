"""Split Go source into decorated top-level declarations with Tree-sitter.

Comment lines between two declarations become the ``start`` decorations of
the second one, with ``"\\n"`` entries for blank lines that separate comment
groups. Comments after the last declaration become its ``end`` decorations.
Declaration bodies are kept verbatim by byte range; only ``type``
declarations are described further, down to the fields of struct types.
"""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Final

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from compatibility_gen._shared.logging import get_logger
from compatibility_gen.comments import BLANK_COMMENT, BLANK_LINE
from compatibility_gen.errors import SourceParseError
from compatibility_gen.gosource.model import (
    Declaration,
    Field,
    GoFile,
    GoPackage,
    StructType,
    TypeSpec,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

__all__ = [
    "DECLARATION_KEYWORDS",
    "parse_dir",
    "parse_file",
    "parse_source",
]

DECLARATION_KEYWORDS: Final[dict[str, str]] = {
    "import_declaration": "import",
    "const_declaration": "const",
    "var_declaration": "var",
    "type_declaration": "type",
    "function_declaration": "func",
    "method_declaration": "func",
}

LOGGER = get_logger(__name__)


@cache
def go_language() -> Language:
    """Return the Tree-sitter grammar for Go."""
    return Language(tree_sitter_go.language())


def parse_source(source: str, *, path: Path | None = None) -> GoFile:
    """Parse Go ``source`` into a :class:`GoFile`.

    Raises
    ------
    SourceParseError
        If the source does not parse, has no package clause, or holds
        statements at top level.
    """
    data = source.encode("utf-8")
    root = Parser(go_language()).parse(data).root_node
    if root.has_error:
        broken = _first_error(root)
        raise SourceParseError("syntax error", path=path, line=_line(broken))

    children = root.named_children
    clause_index = next(
        (index for index, node in enumerate(children) if node.type != "comment"), None
    )
    if clause_index is None or children[clause_index].type != "package_clause":
        raise SourceParseError("expected package clause", path=path, line=1)
    clause = children[clause_index]
    package_name = next(
        _text(data, node) for node in clause.named_children if node.type == "package_identifier"
    )

    header_end = data.find(b"\n", clause.end_byte)
    if header_end == -1:
        header_end = len(data)
    go_file = GoFile(
        path=path,
        package=package_name,
        header=data[:header_end].decode("utf-8").rstrip(" \t\r"),
    )

    pending: list[str] = []
    space_before = False
    last_end = header_end
    last_row = -1
    last_start = 0
    for node in children[clause_index + 1 :]:
        if node.start_byte < header_end:
            continue
        if (
            node.type == "comment"
            and go_file.declarations
            and not pending
            and node.start_point[0] == last_row
        ):
            # Same-line comment after a declaration stays part of its text.
            go_file.declarations[-1].text = _slice(data, last_start, node.end_byte)
            last_end = node.end_byte
            continue
        if data.count(b"\n", last_end, node.start_byte) >= 2:
            if pending:
                pending.append(BLANK_LINE)
            else:
                space_before = True
        last_end = node.end_byte
        if node.type == "comment":
            pending.append(_normalise_comment(_text(data, node)))
            continue
        keyword = DECLARATION_KEYWORDS.get(node.type)
        if keyword is None:
            raise SourceParseError(
                f"unexpected {node.type} at top level", path=path, line=_line(node)
            )
        declaration = Declaration(
            keyword=keyword,
            text=_slice(data, node.start_byte, node.end_byte),
            start=pending,
            space_before=space_before,
            line=_line(node),
        )
        if node.type == "type_declaration":
            _describe(declaration, node, data)
        go_file.declarations.append(declaration)
        pending = []
        space_before = False
        last_row = node.end_point[0]
        last_start = node.start_byte

    trailing = [BLANK_LINE, *pending] if space_before and pending else pending
    if go_file.declarations:
        go_file.declarations[-1].end = trailing
    else:
        go_file.trailing = trailing
    return go_file


def parse_file(path: Path) -> GoFile:
    """Read and parse the Go file at ``path``.

    Raises
    ------
    SourceParseError
        If the file cannot be read or parsed.
    """
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceParseError(f"unable to read source: {exc}", path=path) from exc
    return parse_source(source, path=path)


def parse_dir(
    directory: Path,
    file_filter: Callable[[str], bool] | None = None,
) -> dict[str, GoPackage]:
    """Parse the ``*.go`` files of ``directory``, grouped by package name.

    Parameters
    ----------
    directory : Path
        Directory holding the Go files; subdirectories are not visited.
    file_filter : Callable[[str], bool] | None, optional
        Predicate on the file name; files it rejects are skipped.

    Returns
    -------
    dict[str, GoPackage]
        Packages keyed by name, files in path order.

    Raises
    ------
    SourceParseError
        If ``directory`` is not a directory or a file cannot be parsed.
    """
    if not directory.is_dir():
        raise SourceParseError("not a directory", path=directory)
    packages: dict[str, GoPackage] = {}
    for path in sorted(directory.glob("*.go")):
        if not path.is_file():
            continue
        if file_filter is not None and not file_filter(path.name):
            LOGGER.debug(
                "Skipping %s", path, extra={"operation": "parse_dir", "status": "skipped"}
            )
            continue
        go_file = parse_file(path)
        package = packages.setdefault(go_file.package, GoPackage(name=go_file.package))
        package.files[path] = go_file
    return packages


def _text(data: bytes, node: Node) -> str:
    return data[node.start_byte : node.end_byte].decode("utf-8")


def _slice(data: bytes, start: int, end: int) -> str:
    return data[start:end].decode("utf-8").rstrip(" \t\r")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _first_error(node: Node) -> Node:
    if node.is_error or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            return _first_error(child)
    return node


def _normalise_comment(text: str) -> str:
    if not text.startswith("//"):
        return text
    stripped = text.rstrip()
    return BLANK_COMMENT if stripped == "//" else stripped


def _describe(declaration: Declaration, node: Node, data: bytes) -> None:
    specs = [child for child in node.named_children if child.type in ("type_spec", "type_alias")]
    if len(specs) != 1 or any(child.type == "(" for child in node.children):
        declaration.grouped = True
        return
    spec = specs[0]
    name_node = spec.child_by_field_name("name")
    if name_node is None:
        return
    name = _text(data, name_node)
    if spec.type == "type_alias":
        declaration.type_spec = TypeSpec(name=name, alias=True)
        return
    type_node = spec.child_by_field_name("type")
    if type_node is None or type_node.type != "struct_type":
        declaration.type_spec = TypeSpec(name=name)
        return
    declaration.type_spec = TypeSpec(name=name, struct=_struct(type_node, data))


def _struct(node: Node, data: bytes) -> StructType:
    fields: list[Field] = []
    for body in node.named_children:
        if body.type != "field_declaration_list":
            continue
        fields.extend(
            _field(child, data) for child in body.named_children if child.type == "field_declaration"
        )
    return StructType(fields=tuple(fields))


def _field(node: Node, data: bytes) -> Field:
    names = tuple(_text(data, child) for child in node.children_by_field_name("name"))
    tag_node = node.child_by_field_name("tag")
    tag = _text(data, tag_node) if tag_node is not None else None
    type_node = node.child_by_field_name("type")
    type_expr = _text(data, type_node) if type_node is not None else ""
    if names or type_node is None:
        return Field(names=names, type_expr=type_expr, tag=tag)

    pointer = any(child.type == "*" for child in node.children)
    target = type_node
    if target.type == "generic_type":
        target = target.child_by_field_name("type") or target
    qualifier: str | None = None
    type_name = _text(data, target)
    if target.type == "qualified_type":
        package_node = target.child_by_field_name("package")
        selected = target.child_by_field_name("name")
        qualifier = _text(data, package_node) if package_node is not None else None
        type_name = _text(data, selected) if selected is not None else type_name
    return Field(
        names=(),
        type_expr=f"*{type_expr}" if pointer else type_expr,
        tag=tag,
        pointer=pointer,
        qualifier=qualifier,
        type_name=type_name,
    )
