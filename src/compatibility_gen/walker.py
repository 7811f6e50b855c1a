"""Visit the declarations of a Go file and annotate its API types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from compatibility_gen._shared.logging import get_logger, with_fields
from compatibility_gen.comments import ensure_compatibility_comment
from compatibility_gen.maturity import classify_maturity
from compatibility_gen.policy import validate_compatibility_level
from compatibility_gen.tags import extract_compatibility_level, extract_is_internal

if TYPE_CHECKING:
    from compatibility_gen.gosource.model import Declaration, GoFile

__all__ = [
    "TYPE_META_MARKER",
    "annotate_declaration",
    "is_api_type",
    "process_file",
]

TYPE_META_MARKER: Final = "TypeMeta"

LOGGER = get_logger(__name__)


def is_api_type(declaration: Declaration) -> bool:
    """Return True when ``declaration`` is a struct embedding ``<pkg>.TypeMeta``.

    Only single-spec ``type Name struct {...}`` declarations qualify. The
    marker must be embedded by value through a package selector, as in
    ``metav1.TypeMeta `json:",inline"```.
    """
    if declaration.keyword != "type" or declaration.grouped:
        return False
    spec = declaration.type_spec
    if spec is None or spec.struct is None:
        return False
    return any(
        field.embedded
        and not field.pointer
        and field.qualifier is not None
        and field.type_name == TYPE_META_MARKER
        for field in spec.struct.fields
    )


def annotate_declaration(declaration: Declaration, namespace: str) -> bool:
    """Validate one API type and synchronise its compatibility comment.

    Returns
    -------
    bool
        True when the declaration's annotation lines changed.

    Raises
    ------
    MalformedTagError
        If a compatibility tag value cannot be interpreted.
    PolicyViolationError
        If the tags contradict the maturity of ``namespace``.
    """
    type_name = declaration.name or "<anonymous>"
    logger = with_fields(LOGGER, operation="annotate_declaration", type_name=type_name)
    logger.debug("API type found: %s", type_name)
    logger.debug("  Start   : %r", declaration.start)
    logger.debug("  End     : %r", declaration.end)

    internal = extract_is_internal(type_name, declaration.start)
    level = extract_compatibility_level(type_name, declaration.start)
    maturity = classify_maturity(namespace)
    logger.debug("  Internal: %s Level: %s Maturity: %s", internal, level, maturity.value)

    effective = validate_compatibility_level(
        type_name, internal=internal, level=level, maturity=maturity
    )
    changed = ensure_compatibility_comment(declaration.start, effective)
    if changed:
        logger.debug("  Updated compatibility comment to level %d", effective)
    return changed


def process_file(go_file: GoFile) -> bool:
    """Annotate every API type of ``go_file`` in source order.

    Processing stops at the first error, which propagates to the caller.

    Returns
    -------
    bool
        True when any declaration changed.
    """
    changed = False
    for declaration in go_file.declarations:
        if not is_api_type(declaration):
            continue
        if annotate_declaration(declaration, go_file.package):
            changed = True
    return changed
