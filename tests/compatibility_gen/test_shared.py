"""Tests for structured logging, typed settings, and Problem Details helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from compatibility_gen._shared.logging import JsonFormatter, get_logger, with_fields
from compatibility_gen._shared.problem_details import (
    ProblemDetailsParams,
    build_problem_details,
    render_problem,
)
from compatibility_gen._shared.process import ProcessRunner, ToolExecutionError
from compatibility_gen._shared.settings import SettingsError, get_settings
from compatibility_gen.errors import ErrorCode, PersistError, SourceParseError, get_type_uri


def test_json_formatter_includes_structured_fields() -> None:
    logger = logging.getLogger("compatibility_gen.tests")
    record = logger.makeRecord(
        "compatibility_gen.tests",
        logging.INFO,
        __file__,
        42,
        "Updated %s",
        ("types.go",),
        None,
        extra={"operation": "process_package", "package": "v1", "changed": 2},
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Updated types.go"
    assert payload["level"] == "INFO"
    assert payload["operation"] == "process_package"
    assert payload["package"] == "v1"
    assert payload["changed"] == 2


def test_adapter_binds_fields_and_infers_status(caplog: pytest.LogCaptureFixture) -> None:
    adapter = with_fields(get_logger("compatibility_gen.tests"), package="v1")

    with caplog.at_level(logging.DEBUG, logger="compatibility_gen.tests"):
        adapter.info("processing")
        adapter.error("failed", extra={"package": "v2"})

    info, error = caplog.records
    assert info.package == "v1"
    assert info.operation == "unknown"
    assert info.status == "success"
    assert error.package == "v2"
    assert error.status == "error"


def test_with_fields_keeps_bound_fields() -> None:
    adapter = with_fields(with_fields(get_logger("compatibility_gen.tests"), a=1), b=2)

    assert adapter.extra == {"a": 1, "b": 2}


def test_settings_defaults() -> None:
    settings = get_settings()

    assert settings.go_executable == "go"
    assert settings.resolve_timeout == 120.0
    assert settings.log_level == "INFO"
    assert settings.log_json is True


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COMPAT_GEN_GO_EXECUTABLE", "/usr/local/go/bin/go")
    monkeypatch.setenv("COMPAT_GEN_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.go_executable == "/usr/local/go/bin/go"
    assert settings.log_level == "DEBUG"
    assert get_settings() is settings


@pytest.mark.parametrize(
    ("key", "value"),
    [("COMPAT_GEN_LOG_LEVEL", "chatty"), ("COMPAT_GEN_RESOLVE_TIMEOUT", "0")],
)
def test_invalid_settings_raise_problem(
    monkeypatch: pytest.MonkeyPatch, key: str, value: str
) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(SettingsError) as excinfo:
        get_settings()

    assert excinfo.value.problem["type"] == "urn:compatibility-gen:problems:settings-invalid"
    assert excinfo.value.errors


def test_source_parse_error_location() -> None:
    error = SourceParseError("unbalanced ')'", path=Path("types.go"), line=7)

    assert str(error) == "types.go:7: unbalanced ')'"
    problem = error.to_problem_details()
    assert problem["path"] == "types.go"
    assert problem["line"] == 7
    assert problem["type"] == get_type_uri(ErrorCode.SOURCE_PARSE_ERROR)


def test_persist_error_problem_details() -> None:
    problem = PersistError(Path("/api/v1/types.go"), "read-only file system").to_problem_details(
        instance="urn:compatibility-gen:run:1"
    )

    assert problem["status"] == 500
    assert problem["code"] == "persist-failed"
    assert problem["instance"] == "urn:compatibility-gen:run:1"
    assert problem["detail"] == "unable to write /api/v1/types.go: read-only file system"


def test_problem_details_keep_standard_members() -> None:
    problem = build_problem_details(
        ProblemDetailsParams(
            type="urn:compatibility-gen:problems:policy-violation",
            title="PolicyViolationError",
            status=422,
            detail="Foo: level or internal must be specified",
            instance="urn:compatibility-gen:error",
            extensions={"status": 200, "type_name": "Foo"},
        )
    )

    assert problem["status"] == 422
    assert problem["type_name"] == "Foo"
    assert json.loads(render_problem(problem)) == problem


def test_missing_executable_reports_tool_problem() -> None:
    with pytest.raises(ToolExecutionError) as excinfo:
        ProcessRunner().run(["compatibility-gen-missing-go-toolchain", "list"])

    problem = excinfo.value.problem
    assert problem is not None
    assert problem["type"] == "urn:compatibility-gen:problems:tool-missing"
    assert problem["executable"] == "compatibility-gen-missing-go-toolchain"
    assert problem["command"] == ["compatibility-gen-missing-go-toolchain", "list"]
