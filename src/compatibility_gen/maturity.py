"""Classify API maturity from the name of a version namespace."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Final

__all__ = [
    "Maturity",
    "classify_maturity",
]

_GENERALLY_AVAILABLE: Final = re.compile(r"v\d*")
_PRERELEASE: Final = re.compile(r"v\d*beta\d*")
_EXPERIMENTAL: Final = re.compile(r"v\d*alpha\d*")


class Maturity(StrEnum):
    """Stability implied by a Kubernetes-style API version name."""

    GENERALLY_AVAILABLE = "generally-available"
    PRERELEASE = "pre-release"
    EXPERIMENTAL = "experimental"
    UNCLASSIFIED = "unclassified"


def classify_maturity(namespace: str) -> Maturity:
    """Return the maturity of ``namespace``.

    Only the final ``/``-separated segment is inspected, so both ``v1beta1`` and
    ``github.com/openshift/api/config/v1beta1`` are pre-release.

    Examples
    --------
    >>> classify_maturity("v1")
    <Maturity.GENERALLY_AVAILABLE: 'generally-available'>
    >>> classify_maturity("v2alpha1")
    <Maturity.EXPERIMENTAL: 'experimental'>
    >>> classify_maturity("helpers")
    <Maturity.UNCLASSIFIED: 'unclassified'>
    """
    segment = namespace.rstrip("/").rsplit("/", 1)[-1]
    if _GENERALLY_AVAILABLE.fullmatch(segment):
        return Maturity.GENERALLY_AVAILABLE
    if _PRERELEASE.fullmatch(segment):
        return Maturity.PRERELEASE
    if _EXPERIMENTAL.fullmatch(segment):
        return Maturity.EXPERIMENTAL
    return Maturity.UNCLASSIFIED
