"""Policy matrix tying API maturity to the compatibility levels it may promise.

The rules are evaluated in a fixed order; the first violated rule raises
:class:`~compatibility_gen.errors.PolicyViolationError`.

=============  =======================================
Maturity       Allowed levels
=============  =======================================
GA (v1)        1
beta           2, 3
alpha          4
unclassified   only internal types (level 4)
internal       4 (the default when no level is given)
=============  =======================================
"""

from __future__ import annotations

from typing import Final

from compatibility_gen.errors import PolicyRule, PolicyViolationError
from compatibility_gen.maturity import Maturity
from compatibility_gen.tags import INTERNAL_TAG_NAME, LEVEL_TAG_NAME

__all__ = [
    "INTERNAL_DEFAULT_LEVEL",
    "validate_compatibility_level",
]

INTERNAL_DEFAULT_LEVEL: Final = 4


def validate_compatibility_level(
    type_name: str,
    *,
    internal: bool,
    level: int | None,
    maturity: Maturity,
) -> int:
    """Return the effective compatibility level of ``type_name``.

    Parameters
    ----------
    type_name : str
        Name of the declaration, used in error messages.
    internal : bool
        Whether the type is tagged internal.
    level : int | None
        Declared level, or None when the type has no level tag.
    maturity : Maturity
        Maturity of the enclosing version namespace.

    Returns
    -------
    int
        The effective level (1..4).

    Raises
    ------
    PolicyViolationError
        If the combination of tags and maturity is not allowed.
    """
    if not internal and level is None:
        raise PolicyViolationError(
            type_name,
            PolicyRule.LEVEL_OR_INTERNAL_REQUIRED,
            f"level or internal must be specified: tag the {type_name} API with "
            f"+{LEVEL_TAG_NAME}=<1-4> or +{INTERNAL_TAG_NAME}",
        )
    if level is None:
        return INTERNAL_DEFAULT_LEVEL
    if internal and level != INTERNAL_DEFAULT_LEVEL:
        raise PolicyViolationError(
            type_name,
            PolicyRule.INTERNAL_REQUIRES_LEVEL_4,
            "internal APIs are only allowed to offer level 4 compatibility: "
            f"long term support cannot be offered for the {type_name} API",
        )
    if internal:
        return INTERNAL_DEFAULT_LEVEL
    if maturity is Maturity.UNCLASSIFIED:
        raise PolicyViolationError(
            type_name,
            PolicyRule.UNCLASSIFIED_MUST_BE_INTERNAL,
            "APIs whose versions do not conform to kube apiVersion format cannot be exposed: "
            f"the {type_name} API must be tagged with +{INTERNAL_TAG_NAME}",
        )
    if maturity is Maturity.GENERALLY_AVAILABLE and level != 1:
        raise PolicyViolationError(
            type_name,
            PolicyRule.GA_REQUIRES_LEVEL_1,
            "generally available APIs must offer level 1 compatibility "
            "and be supported for a minimum of 12 months",
        )
    if maturity is Maturity.PRERELEASE and level == 1:
        raise PolicyViolationError(
            type_name,
            PolicyRule.PRERELEASE_LEVEL_TOO_STRONG,
            "pre-release (beta) APIs must offer level 2 or 3 compatibility: "
            f"the {type_name} API should be versioned as generally available "
            "if you wish to offer level 1 compatibility",
        )
    if maturity is Maturity.PRERELEASE and level == 4:
        raise PolicyViolationError(
            type_name,
            PolicyRule.PRERELEASE_LEVEL_TOO_WEAK,
            "pre-release (beta) APIs must offer level 2 or 3 compatibility: "
            f"the {type_name} API should be versioned as experimental (alpha) "
            "if you wish to offer level 4 compatibility",
        )
    if maturity is Maturity.EXPERIMENTAL and level != 4:
        raise PolicyViolationError(
            type_name,
            PolicyRule.EXPERIMENTAL_REQUIRES_LEVEL_4,
            "experimental (alpha) APIs are only allowed to offer level 4 compatibility: "
            f"long term support cannot be offered for the {type_name} API",
        )
    return level
