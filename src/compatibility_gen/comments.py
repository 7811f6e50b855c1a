"""Keep exactly one "Compatibility level" comment above an API type.

Annotation lines are the comment lines gathered above a declaration, in
source order. ``"\\n"`` stands for a blank line and ``"// "`` for an empty
comment line; both only affect how the block is split into godoc paragraphs.

The work is split into pure steps (:func:`find_existing_comment`,
:func:`find_insertion_anchor`, :func:`splice_comment`) and one entry point,
:func:`ensure_compatibility_comment`, that applies them in place.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from compatibility_gen.tags import is_tag_line

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = [
    "BLANK_COMMENT",
    "BLANK_LINE",
    "COMMENT_PREFIX",
    "LEVEL_SENTENCES",
    "comment_for_level",
    "compatibility_comment",
    "ensure_compatibility_comment",
    "find_existing_comment",
    "find_insertion_anchor",
    "splice_comment",
]

BLANK_LINE: Final = "\n"
BLANK_COMMENT: Final = "// "
COMMENT_PREFIX: Final = "// Compatibility level "

LEVEL_SENTENCES: Final[dict[int, str]] = {
    1: "Stable within a major release for a minimum of 12 months or 3 minor releases "
    "(whichever is longer).",
    2: "Stable within a major release for a minimum of 9 months or 3 minor releases "
    "(whichever is longer).",
    3: "Will attempt to be as compatible from version to version as possible, "
    "but version to version compatibility is not guaranteed.",
    4: "No compatibility is provided, the API can change at any point for any reason. "
    "These capabilities should not be used by applications needing long term support.",
}


def comment_for_level(level: int) -> str:
    """Return the sentence describing ``level``.

    Raises
    ------
    ValueError
        If ``level`` is not one of 1, 2, 3, 4.
    """
    try:
        return LEVEL_SENTENCES[level]
    except KeyError:
        message = f"unknown compatibility level {level!r}"
        raise ValueError(message) from None


def compatibility_comment(level: int) -> str:
    """Return the canonical comment line for ``level``."""
    return f"{COMMENT_PREFIX}{level}: {comment_for_level(level)}"


def find_existing_comment(lines: Sequence[str], comment: str) -> tuple[int | None, bool]:
    """Locate a compatibility comment already present in ``lines``.

    Returns
    -------
    tuple[int | None, bool]
        ``(index, stale)`` for the first line that either equals ``comment``
        (``stale`` False) or starts with :data:`COMMENT_PREFIX` (``stale``
        True); ``(None, False)`` when there is none.
    """
    for index, line in enumerate(lines):
        if line == comment:
            return index, False
        if line.startswith(COMMENT_PREFIX):
            return index, True
    return None, False


def find_insertion_anchor(lines: Sequence[str]) -> int:
    """Return the index a new comment should be inserted at.

    Blank lines at the very end of the block are stepped over. From there the
    scan walks backward and moves the anchor onto every tag line until it
    reaches a blank line, so the comment lands ahead of the tags of the
    paragraph adjacent to the declaration. Without tags the anchor is the end
    of that paragraph.

    Examples
    --------
    >>> find_insertion_anchor(["// Foo is a thing.", "// +genclient"])
    1
    >>> find_insertion_anchor(["// +genclient", "\\n", "// Foo is a thing."])
    3
    >>> find_insertion_anchor(["// +openshift:compatibility-gen:level=1", "\\n"])
    0
    """
    end = len(lines)
    while end > 0 and lines[end - 1] == BLANK_LINE:
        end -= 1
    anchor = end
    for index in range(end - 1, -1, -1):
        line = lines[index]
        if line == BLANK_LINE:
            break
        if is_tag_line(line):
            anchor = index
    return anchor


def splice_comment(lines: Sequence[str], anchor: int, comment: str) -> list[str]:
    """Return a copy of ``lines`` with ``comment`` inserted at ``anchor``.

    Empty comment lines are added around ``comment`` where needed so it
    renders as its own godoc paragraph. A tag right after the comment stays
    adjacent, unless the comment opens the block.
    """
    before = list(lines[:anchor])
    after = list(lines[anchor:])
    inserted = [comment]
    if before and before[-1] not in (BLANK_LINE, BLANK_COMMENT):
        inserted.insert(0, BLANK_COMMENT)
    if (
        after
        and after[0] not in (BLANK_LINE, BLANK_COMMENT)
        and (not is_tag_line(after[0]) or not before)
    ):
        inserted.append(BLANK_COMMENT)
    return before + inserted + after


def ensure_compatibility_comment(lines: list[str], level: int) -> bool:
    """Make ``lines`` carry the compatibility comment for ``level``.

    A stale comment is rewritten at the same index; otherwise a new one is
    spliced in. ``lines`` is modified in place.

    Returns
    -------
    bool
        True when ``lines`` changed.
    """
    comment = compatibility_comment(level)
    index, stale = find_existing_comment(lines, comment)
    if index is not None:
        if not stale:
            return False
        lines[index] = comment
        return True
    lines[:] = splice_comment(lines, find_insertion_anchor(lines), comment)
    return True
