"""Render a :class:`~compatibility_gen.gosource.model.GoFile` back to Go source."""

from __future__ import annotations

from typing import TYPE_CHECKING

from compatibility_gen.comments import BLANK_LINE

if TYPE_CHECKING:
    from compatibility_gen.gosource.model import GoFile

__all__ = ["render_file"]


def _render_line(line: str) -> str:
    if line == BLANK_LINE:
        return ""
    return line.rstrip()


def render_file(go_file: GoFile) -> str:
    """Return the source text of ``go_file``.

    Declaration text is emitted verbatim. Decorations are emitted one per
    line with trailing whitespace removed, so an empty comment ``"// "``
    prints as ``//``. Blank lines between declarations collapse to one and
    the result always ends with a single newline.
    """
    parts = [go_file.header]
    for declaration in go_file.declarations:
        parts.append("\n")
        if declaration.space_before:
            parts.append("\n")
        parts.extend(_render_line(line) + "\n" for line in declaration.start)
        parts.append(declaration.text)

    trailing = go_file.declarations[-1].end if go_file.declarations else go_file.trailing
    trailing = list(trailing)
    while trailing and trailing[-1] == BLANK_LINE:
        trailing.pop()
    parts.extend("\n" + _render_line(line) for line in trailing)
    parts.append("\n")
    return "".join(parts)
