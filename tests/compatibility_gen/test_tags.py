from __future__ import annotations

import pytest
from compatibility_gen.errors import ErrorCode, MalformedTagError
from compatibility_gen.tags import (
    INTERNAL_TAG_NAME,
    LEVEL_TAG_NAME,
    extract_comment_tags,
    extract_compatibility_level,
    extract_is_internal,
    parse_bool,
)


def test_extract_comment_tags_splits_on_first_equals() -> None:
    lines = [
        "// Foo is a thing.",
        "// +genclient",
        "// +kubebuilder:validation:XValidation:rule=self == oldSelf",
        "\n",
        "  // +k8s:deepcopy-gen:interfaces=k8s.io/apimachinery/pkg/runtime.Object",
    ]

    tags = extract_comment_tags("// +", lines)

    assert tags == {
        "genclient": [""],
        "kubebuilder:validation:XValidation:rule": ["self == oldSelf"],
        "k8s:deepcopy-gen:interfaces": ["k8s.io/apimachinery/pkg/runtime.Object"],
    }


def test_extract_comment_tags_accumulates_repeated_keys() -> None:
    tags = extract_comment_tags("// +", ["// +a=1", "// +a=2"])

    assert tags == {"a": ["1", "2"]}


@pytest.mark.parametrize("level", [1, 2, 3, 4])
def test_extract_compatibility_level(level: int) -> None:
    lines = ["// Foo is a thing.", f"// +{LEVEL_TAG_NAME}={level}"]

    assert extract_compatibility_level("Foo", lines) == level


def test_extract_compatibility_level_absent() -> None:
    assert extract_compatibility_level("Foo", ["// Foo is a thing.", "// +genclient"]) is None


def test_extract_compatibility_level_uses_first_value() -> None:
    lines = [f"// +{LEVEL_TAG_NAME}=2", f"// +{LEVEL_TAG_NAME}=3"]

    assert extract_compatibility_level("Foo", lines) == 2


@pytest.mark.parametrize("value", ["", "one", "1.0", "0_4", " 2"])
def test_extract_compatibility_level_rejects_non_integers(value: str) -> None:
    with pytest.raises(MalformedTagError) as excinfo:
        extract_compatibility_level("Foo", [f"// +{LEVEL_TAG_NAME}={value}"])

    assert excinfo.value.code is ErrorCode.MALFORMED_TAG
    assert excinfo.value.tag == LEVEL_TAG_NAME
    assert str(excinfo.value).startswith("Foo: ")


@pytest.mark.parametrize("value", ["0", "5", "-1", "42"])
def test_extract_compatibility_level_rejects_out_of_range(value: str) -> None:
    with pytest.raises(MalformedTagError, match="level must be one of"):
        extract_compatibility_level("Foo", [f"// +{LEVEL_TAG_NAME}={value}"])


def test_extract_is_internal_absent_is_false() -> None:
    assert extract_is_internal("Foo", [f"// +{LEVEL_TAG_NAME}=1"]) is False


def test_extract_is_internal_bare_tag_is_true() -> None:
    assert extract_is_internal("Foo", [f"// +{INTERNAL_TAG_NAME}"]) is True


@pytest.mark.parametrize(
    ("value", "expected"),
    [("true", True), ("T", True), ("1", True), ("false", False), ("FALSE", False), ("0", False)],
)
def test_extract_is_internal_parses_value(value: str, expected: bool) -> None:
    assert extract_is_internal("Foo", [f"// +{INTERNAL_TAG_NAME}={value}"]) is expected


def test_extract_is_internal_rejects_invalid_boolean() -> None:
    with pytest.raises(MalformedTagError) as excinfo:
        extract_is_internal("Foo", [f"// +{INTERNAL_TAG_NAME}=yes"])

    assert excinfo.value.tag == INTERNAL_TAG_NAME
    assert excinfo.value.value == "yes"


def test_parse_bool_rejects_mixed_case() -> None:
    with pytest.raises(ValueError, match="invalid syntax"):
        parse_bool("tRUE")
