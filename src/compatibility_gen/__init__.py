"""Validate OpenShift compatibility tags and maintain compatibility level comments.

Examples
--------
>>> from compatibility_gen import generate_compatibility_comments
>>> generate_compatibility_comments(["github.com/openshift/api/config/v1"])  # doctest: +SKIP
"""

from __future__ import annotations

from compatibility_gen.comments import compatibility_comment, ensure_compatibility_comment
from compatibility_gen.errors import (
    CompatibilityGenError,
    ErrorCode,
    MalformedTagError,
    PackageResolutionError,
    PersistError,
    PolicyRule,
    PolicyViolationError,
    SourceParseError,
)
from compatibility_gen.generator import (
    generate_compatibility_comments,
    insert_compatibility_level_comments,
    only_types_files,
    process_package,
)
from compatibility_gen.maturity import Maturity, classify_maturity
from compatibility_gen.policy import validate_compatibility_level
from compatibility_gen.walker import is_api_type, process_file

__all__ = [
    "CompatibilityGenError",
    "ErrorCode",
    "MalformedTagError",
    "Maturity",
    "PackageResolutionError",
    "PersistError",
    "PolicyRule",
    "PolicyViolationError",
    "SourceParseError",
    "classify_maturity",
    "compatibility_comment",
    "ensure_compatibility_comment",
    "generate_compatibility_comments",
    "insert_compatibility_level_comments",
    "is_api_type",
    "only_types_files",
    "process_file",
    "process_package",
    "validate_compatibility_level",
]
