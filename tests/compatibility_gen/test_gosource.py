from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest
from compatibility_gen.errors import SourceParseError
from compatibility_gen.gosource import parse_dir, parse_source, render_file

TYPES_GO = dedent(
    """\
    // Copyright 2024 The OpenShift Authors.

    package v1 // import "github.com/openshift/api/example/v1"

    import (
    \tmetav1 "k8s.io/apimachinery/pkg/apis/meta/v1"
    )

    // +genclient
    // +genclient:nonNamespaced
    // +k8s:deepcopy-gen:interfaces=k8s.io/apimachinery/pkg/runtime.Object

    // Widget describes a widget.
    //
    // +openshift:compatibility-gen:level=1
    type Widget struct {
    \tmetav1.TypeMeta `json:",inline"`
    \t// metadata is the standard object's metadata.
    \tmetav1.ObjectMeta `json:"metadata,omitempty"`

    \tSpec   WidgetSpec   `json:"spec"`
    \tStatus WidgetStatus `json:"status"`
    }

    // WidgetSpec is the desired state.
    type WidgetSpec struct {
    \t// Size in "units"; may be `zero`.
    \tSize, Weight int32 `json:"size"`
    \tLabels map[string]string
    \tNested struct {
    \t\tInner []string
    \t}
    }

    type WidgetStatus struct{}

    type (
    \tAlpha string
    \tBeta  string
    )

    type Name = string

    const MaxSize = 10

    func (w *Widget) Size() int32 {
    \tif w == nil {
    \t\treturn 0
    \t}
    \treturn w.Spec.Size
    }
    """
)


def test_round_trip_is_byte_identical() -> None:
    go_file = parse_source(TYPES_GO)

    assert render_file(go_file) == TYPES_GO


def test_package_and_header() -> None:
    go_file = parse_source(TYPES_GO)

    assert go_file.package == "v1"
    assert go_file.header.endswith('package v1 // import "github.com/openshift/api/example/v1"')
    assert go_file.header.startswith("// Copyright 2024")


def test_declarations_and_decorations() -> None:
    go_file = parse_source(TYPES_GO)

    keywords = [declaration.keyword for declaration in go_file.declarations]
    assert keywords == ["import", "type", "type", "type", "type", "type", "const", "func"]

    widget = go_file.declarations[1]
    assert widget.name == "Widget"
    assert widget.space_before is True
    assert widget.start == [
        "// +genclient",
        "// +genclient:nonNamespaced",
        "// +k8s:deepcopy-gen:interfaces=k8s.io/apimachinery/pkg/runtime.Object",
        "\n",
        "// Widget describes a widget.",
        "// ",
        "// +openshift:compatibility-gen:level=1",
    ]
    assert widget.text.startswith("type Widget struct {")
    assert widget.text.endswith("}")


def test_struct_fields() -> None:
    go_file = parse_source(TYPES_GO)

    widget = go_file.declarations[1].type_spec
    assert widget is not None
    assert widget.struct is not None
    type_meta, object_meta, spec, status = widget.struct.fields
    assert type_meta.embedded
    assert type_meta.qualifier == "metav1"
    assert type_meta.type_name == "TypeMeta"
    assert type_meta.tag == '`json:",inline"`'
    assert object_meta.type_name == "ObjectMeta"
    assert spec.names == ("Spec",)
    assert not spec.embedded
    assert status.type_expr == "WidgetStatus"

    widget_spec = go_file.declarations[2].type_spec
    assert widget_spec is not None
    assert widget_spec.struct is not None
    assert [field.names for field in widget_spec.struct.fields] == [
        ("Size", "Weight"),
        ("Labels",),
        ("Nested",),
    ]


def test_grouped_alias_and_empty_struct() -> None:
    go_file = parse_source(TYPES_GO)

    empty, grouped, alias = go_file.declarations[3:6]
    assert empty.type_spec is not None
    assert empty.type_spec.struct is not None
    assert empty.type_spec.struct.fields == ()
    assert grouped.grouped is True
    assert grouped.type_spec is None
    assert alias.type_spec is not None
    assert alias.type_spec.alias is True


def test_embedded_field_variants() -> None:
    source = dedent(
        """\
        package v1

        type Wrapper struct {
        \t*metav1.TypeMeta
        \tTypeMeta
        \tItems [5]int
        }
        """
    )

    spec = parse_source(source).declarations[0].type_spec
    assert spec is not None
    assert spec.struct is not None
    pointer, plain, array = spec.struct.fields
    assert pointer.embedded and pointer.pointer and pointer.qualifier == "metav1"
    assert plain.embedded and plain.qualifier is None
    assert not array.embedded


def test_generic_struct_type_params() -> None:
    source = "package v1\n\ntype Box[T any] struct {\n\tValue T\n}\n"

    spec = parse_source(source).declarations[0].type_spec

    assert spec is not None
    assert spec.name == "Box"
    assert spec.struct is not None
    assert spec.struct.fields[0].names == ("Value",)


def test_generic_struct_with_pointer_constraint() -> None:
    source = dedent(
        """\
        package v1

        type List[T any, P *T] struct {
        \tmetav1.TypeMeta `json:",inline"`
        \tItems []T
        }
        """
    )

    spec = parse_source(source).declarations[0].type_spec

    assert spec is not None
    assert spec.name == "List"
    assert spec.struct is not None
    type_meta, items = spec.struct.fields
    assert type_meta.embedded and type_meta.qualifier == "metav1"
    assert items.names == ("Items",)


def test_same_line_comment_stays_with_declaration() -> None:
    source = "package v1\n\nconst A = 1 // the answer\n\n// B doc.\nconst B = 2\n"

    go_file = parse_source(source)

    first, second = go_file.declarations
    assert first.text == "const A = 1 // the answer"
    assert second.start == ["// B doc."]
    assert render_file(go_file) == source


def test_syntax_error_reports_line() -> None:
    source = "package v1\n\ntype A int\n\ntype B struct {\n\tName string\n"

    with pytest.raises(SourceParseError) as excinfo:
        parse_source(source, path=Path("types.go"))

    assert excinfo.value.path == Path("types.go")
    assert excinfo.value.line is not None
    assert str(excinfo.value).startswith("types.go:")


def test_trailing_comments_attach_to_last_declaration() -> None:
    source = "package v1\n\nconst A = 1\n\n// +build !ignore_autogenerated\n// trailing\n"

    go_file = parse_source(source)

    assert go_file.declarations[-1].end == ["\n", "// +build !ignore_autogenerated", "// trailing"]
    assert render_file(go_file) == source


def test_blank_comment_renders_without_trailing_space() -> None:
    source = "package v1\n\n// Foo.\n//\n// More.\ntype Foo int\n"

    go_file = parse_source(source)

    assert go_file.declarations[0].start == ["// Foo.", "// ", "// More."]
    assert render_file(go_file) == source


def test_block_comment_is_one_decoration() -> None:
    source = "package v1\n\n/*\nFoo is documented\nhere.\n*/\ntype Foo int\n"

    go_file = parse_source(source)

    assert go_file.declarations[0].start == ["/*\nFoo is documented\nhere.\n*/"]
    assert render_file(go_file) == source


def test_file_without_declarations() -> None:
    source = "// Package v1 is documented here.\npackage v1\n\n// trailing\n"

    go_file = parse_source(source)

    assert go_file.declarations == []
    assert go_file.trailing == ["\n", "// trailing"]
    assert render_file(go_file) == source


@pytest.mark.parametrize(
    "source",
    [
        "type Foo struct{}\n",
        "package\n",
        "package v1\n\ntype Foo struct {\n",
        "package v1\n\ntype Foo struct {)\n",
        'package v1\n\nconst A = "unterminated\n',
        "package v1\n\n/* unterminated\n",
        "package v1\n\nFoo := 1\n",
    ],
)
def test_malformed_sources_raise(source: str) -> None:
    with pytest.raises(SourceParseError):
        parse_source(source)


def test_parse_dir_groups_by_package_and_filters(tmp_path: Path) -> None:
    (tmp_path / "types.go").write_text("package v1\n\ntype A int\n", encoding="utf-8")
    (tmp_path / "types_test.go").write_text("package v1_test\n", encoding="utf-8")
    (tmp_path / "doc.go").write_text("package v1\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not go", encoding="utf-8")

    packages = parse_dir(tmp_path, lambda name: name != "doc.go")

    assert sorted(packages) == ["v1", "v1_test"]
    assert list(packages["v1"].files) == [tmp_path / "types.go"]


def test_parse_dir_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(SourceParseError, match="not a directory"):
        parse_dir(tmp_path / "missing")
