"""Read compatibility tags from the comment lines above a declaration.

Tags follow the ``// +key[=value]`` convention of the Kubernetes code
generators. Two tags matter here::

    // +openshift:compatibility-gen:level=2
    // +openshift:compatibility-gen:internal

A tag whose value cannot be interpreted stops the run with a
:class:`~compatibility_gen.errors.MalformedTagError`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from compatibility_gen._shared.logging import get_logger
from compatibility_gen.errors import MalformedTagError

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = [
    "BASE_TAG_NAME",
    "INTERNAL_TAG_NAME",
    "LEVEL_TAG_NAME",
    "TAG_MARKER",
    "VALID_LEVELS",
    "extract_comment_tags",
    "extract_compatibility_level",
    "extract_is_internal",
    "is_tag_line",
    "parse_bool",
]

TAG_MARKER: Final = "// +"
BASE_TAG_NAME: Final = "openshift:compatibility-gen"
LEVEL_TAG_NAME: Final = BASE_TAG_NAME + ":level"
INTERNAL_TAG_NAME: Final = BASE_TAG_NAME + ":internal"
VALID_LEVELS: Final = frozenset({1, 2, 3, 4})

_TRUE_VALUES: Final = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES: Final = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INTEGER: Final = re.compile(r"[+-]?[0-9]+")

LOGGER = get_logger(__name__)


def is_tag_line(line: str) -> bool:
    """Return True when ``line`` is a ``// +`` tag."""
    return line.startswith(TAG_MARKER)


def extract_comment_tags(marker: str, lines: Iterable[str]) -> dict[str, list[str]]:
    """Collect ``marker``-prefixed tags from ``lines``.

    Each line is stripped; lines that do not start with ``marker`` are ignored.
    The remainder is split on the first ``=`` into key and value (an absent
    value is the empty string). Values of repeated keys accumulate in order.

    Examples
    --------
    >>> extract_comment_tags("// +", ["// +genclient", "// +k8s:x=a", "// prose", "// +k8s:x=b"])
    {'genclient': [''], 'k8s:x': ['a', 'b']}
    """
    tags: dict[str, list[str]] = {}
    for raw in lines:
        line = raw.strip()
        if not line.startswith(marker):
            continue
        key, _, value = line[len(marker) :].partition("=")
        tags.setdefault(key, []).append(value)
    return tags


def parse_bool(value: str) -> bool:
    """Parse ``value`` with the spellings accepted by Go's ``strconv.ParseBool``.

    Raises
    ------
    ValueError
        If ``value`` is not a recognised boolean spelling.
    """
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    message = f"invalid syntax for a boolean: {value!r}"
    raise ValueError(message)


def extract_compatibility_level(type_name: str, lines: Iterable[str]) -> int | None:
    """Return the declared compatibility level, or None when no level tag is present.

    Raises
    ------
    MalformedTagError
        If the tag value is not an integer in 1..4.
    """
    values = extract_comment_tags(TAG_MARKER, lines).get(LEVEL_TAG_NAME)
    if not values:
        return None
    raw = values[0]
    if not _INTEGER.fullmatch(raw):
        LOGGER.error(
            "%s: unable to parse value of %s tag: %r",
            type_name,
            LEVEL_TAG_NAME,
            raw,
            extra={"operation": "extract_level", "type_name": type_name},
        )
        raise MalformedTagError(type_name, LEVEL_TAG_NAME, raw, "not an integer")
    level = int(raw)
    if level not in VALID_LEVELS:
        LOGGER.error(
            "%s: invalid value of %s tag: %d",
            type_name,
            LEVEL_TAG_NAME,
            level,
            extra={"operation": "extract_level", "type_name": type_name},
        )
        raise MalformedTagError(type_name, LEVEL_TAG_NAME, raw, "level must be one of 1, 2, 3, 4")
    return level


def extract_is_internal(type_name: str, lines: Iterable[str]) -> bool:
    """Return True when the declaration is tagged internal.

    A bare ``+openshift:compatibility-gen:internal`` tag means True.

    Raises
    ------
    MalformedTagError
        If the tag value is not a boolean.
    """
    values = extract_comment_tags(TAG_MARKER, lines).get(INTERNAL_TAG_NAME)
    if not values:
        return False
    raw = values[0]
    if not raw:
        return True
    try:
        return parse_bool(raw)
    except ValueError as exc:
        LOGGER.error(
            "%s: error parsing %s tag: %s",
            type_name,
            INTERNAL_TAG_NAME,
            exc,
            extra={"operation": "extract_internal", "type_name": type_name},
        )
        raise MalformedTagError(type_name, INTERNAL_TAG_NAME, raw, str(exc)) from exc
