#!/usr/bin/env python3
"""
CONFIGDIFF ENGINE SUITE
-----------------------
File-level behaviour of CompareEngine: format detection, size limits,
validation gates and atomic canonical write-back.
"""

from pathlib import Path

import pytest

from configdiff.core.engine import CompareEngine
from configdiff.core.models import ConfigFormat, DiffStatus


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / "left.properties").write_text(
        "server.port=8080\nspring.datasource.url=jdbc:mysql://localhost:3306/db\n", encoding="utf-8")
    (tmp_path / "right.properties").write_text(
        "spring.datasource.username=admin\n"
        "spring.datasource.url=jdbc:postgresql://localhost:5432/db\n"
        "server.port=9090\n", encoding="utf-8")
    (tmp_path / "left.yml").write_text("server:\n  port: 8080\n", encoding="utf-8")
    (tmp_path / "right.yaml").write_text("server:\n  context-path: /api\n  port: 8080\n", encoding="utf-8")
    return tmp_path


def test_compare_properties_files(workspace):
    engine = CompareEngine(str(workspace))
    report = engine.compare_files("left.properties", "right.properties")

    assert report["success"] is True
    assert report["status"] == "CHANGED"
    assert report["format"] == "properties"
    assert report["counts"] == {"added": 1, "removed": 0, "modified": 2, "unchanged": 0}
    assert [r.key for r in report["rows"]] == [
        "server.port", "spring.datasource.url", "spring.datasource.username"
    ]


def test_compare_yaml_files_detects_format(workspace):
    engine = CompareEngine(str(workspace))
    report = engine.compare_files("left.yml", "right.yaml")

    assert report["format"] == "yaml"
    assert [(r.key, r.status) for r in report["rows"]] == [
        ("server.context-path", DiffStatus.ADDED),
        ("server.port", DiffStatus.UNCHANGED),
    ]


def test_identical_documents_in_different_order(workspace):
    (workspace / "a.properties").write_text("b=2\n# about a\na=1\n", encoding="utf-8")
    (workspace / "b.properties").write_text("a=1\nb=2\n", encoding="utf-8")

    report = CompareEngine(str(workspace)).compare_files("a.properties", "b.properties")
    assert report["status"] == "IDENTICAL"


@pytest.mark.parametrize("name, explicit, expected", [
    ("app.properties", None, ConfigFormat.PROPERTIES),
    ("app.YML", None, ConfigFormat.YAML),
    ("app.conf", None, ConfigFormat.PROPERTIES),
    ("app.conf", "yaml", ConfigFormat.YAML),
])
def test_detect_format(name, explicit, expected):
    assert CompareEngine().detect_format(name, explicit) is expected


def test_missing_file_is_reported(workspace):
    report = CompareEngine(str(workspace)).compare_files("left.properties", "nope.properties")

    assert report["success"] is False
    assert report["status"] == "FILE_NOT_FOUND"


def test_size_limit_rejects_before_parsing(workspace):
    report = CompareEngine(str(workspace), max_input_bytes=10).compare_files("left.properties", "right.properties")

    assert report["status"] == "INPUT_TOO_LARGE"
    assert report["rows"] == []


def test_size_limit_applies_to_raw_text():
    report = CompareEngine(max_input_bytes=4).compare_texts("a=12345", "a=1", "properties")
    assert report["status"] == "INPUT_TOO_LARGE"


def test_invalid_yaml_warns_but_compares():
    report = CompareEngine().compare_texts("a: b: c\n", "a: b: c\n", "yaml")

    assert report["success"] is True
    assert report["status"] == "IDENTICAL"
    assert any("STRUCTURE_ERROR" in w for w in report["warnings"])


def test_invalid_yaml_fails_in_strict_mode():
    report = CompareEngine(strict=True).compare_texts("a: b: c\n", "a: 1\n", "yaml")

    assert report["success"] is False
    assert report["status"] == "VALIDATION_FAILED"
    assert report["error"].startswith("STRUCTURE_ERROR:L1")


def test_validation_can_be_disabled():
    report = CompareEngine(validate=False).compare_texts("broken\na=1", "a=1", "properties")
    assert report["warnings"] == []


def test_canonicalize_preview_does_not_write(workspace):
    target = workspace / "unsorted.properties"
    target.write_text("b=1\na=2\n", encoding="utf-8")

    result = CompareEngine(str(workspace)).canonicalize_file("unsorted.properties")

    assert result["status"] == "PREVIEW"
    assert result["canonical_content"] == "a=2\nb=1\n"
    assert result["written"] is False
    assert target.read_text(encoding="utf-8") == "b=1\na=2\n"


def test_canonicalize_writes_atomically_with_backup(workspace):
    target = workspace / "unsorted.properties"
    target.write_text("b=1\na=2\n", encoding="utf-8")

    result = CompareEngine(str(workspace)).canonicalize_file("unsorted.properties", dry_run=False)

    assert result["written"] is True
    assert result["status"] == "SORTED"
    assert target.read_text(encoding="utf-8") == "a=2\nb=1\n"
    assert Path(result["backup_created"]).read_text(encoding="utf-8") == "b=1\na=2\n"
    assert not list(workspace.glob("*.configdiff.tmp"))


def test_canonicalize_already_sorted_file(workspace):
    result = CompareEngine(str(workspace)).canonicalize_file("left.yml", dry_run=False)

    assert result["status"] == "UNCHANGED"
    assert result["written"] is False


def test_generate_summary(workspace):
    engine = CompareEngine(str(workspace))
    reports = [
        engine.compare_files("left.properties", "right.properties"),
        engine.compare_files("left.yml", "right.yaml"),
        engine.compare_files("left.yml", "missing.yaml"),
    ]
    summary = engine.generate_summary(reports)

    assert summary["total_comparisons"] == 3
    assert summary["changed"] == 2
    assert summary["errors"] == 1
    assert summary["added"] == 2
    assert summary["modified"] == 2
    assert summary["unchanged"] == 1


LOSSY_YAML = "b: 1\nitems:\n  - one\n  - two\nscript: |\n  echo hi\na: 2\n# trailing note\n"


def test_lossy_yaml_rewrite_is_refused(workspace):
    """SAFETY TEST: sequences, block scalars and trailing comments block an in-place sort."""
    target = workspace / "app.yaml"
    target.write_text(LOSSY_YAML, encoding="utf-8")

    result = CompareEngine(str(workspace)).canonicalize_file("app.yaml", dry_run=False)

    assert result["status"] == "UNSAFE_REWRITE"
    assert result["success"] is False
    assert result["written"] is False
    assert any("sequence item" in f for f in result["findings"])
    assert any("block scalar" in f for f in result["findings"])
    assert any("comment line(s) would be dropped" in f for f in result["findings"])
    assert target.read_text(encoding="utf-8") == LOSSY_YAML
    assert not list(workspace.glob("*.configdiff.backup"))


def test_lossy_yaml_rewrite_with_force(workspace):
    target = workspace / "app.yaml"
    target.write_text(LOSSY_YAML, encoding="utf-8")

    result = CompareEngine(str(workspace)).canonicalize_file("app.yaml", dry_run=False, force=True)

    assert result["written"] is True
    assert target.read_text(encoding="utf-8").startswith("a: 2\n")
