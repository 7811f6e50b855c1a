"""RFC 9457 Problem Details payloads reported when a run stops on an error.

Examples
--------
>>> problem = build_problem_details(
...     ProblemDetailsParams(
...         type="urn:compatibility-gen:problems:policy-violation",
...         title="PolicyViolationError",
...         status=422,
...         detail="Foo: level or internal must be specified",
...         instance="urn:compatibility-gen:error",
...         extensions={"type_name": "Foo"},
...     )
... )
>>> problem["type_name"]
'Foo'
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = [
    "BASE_TYPE_URI",
    "JsonValue",
    "ProblemDetailsDict",
    "ProblemDetailsParams",
    "build_problem_details",
    "render_problem",
]

BASE_TYPE_URI: Final[str] = "urn:compatibility-gen:problems"

type JsonValue = str | int | float | bool | None | list[JsonValue] | dict[str, JsonValue]
type ProblemDetailsDict = dict[str, JsonValue]


@dataclass(frozen=True, slots=True)
class ProblemDetailsParams:
    """Fields of one Problem Details payload; ``extensions`` become top-level members."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
    extensions: Mapping[str, JsonValue] | None = None


def build_problem_details(params: ProblemDetailsParams) -> ProblemDetailsDict:
    """Return the payload described by ``params``.

    Extension members never replace the standard ``type``, ``title``,
    ``status``, ``detail`` and ``instance`` members.
    """
    payload: ProblemDetailsDict = dict(params.extensions or {})
    payload.update(
        type=params.type,
        title=params.title,
        status=params.status,
        detail=params.detail,
        instance=params.instance,
    )
    return payload


def render_problem(problem: ProblemDetailsDict) -> str:
    """Render ``problem`` as a single line of JSON."""
    return json.dumps(problem, default=str)
