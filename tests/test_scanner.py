"""Tests for scanning files and the end-to-end audit pipeline."""

import pytest

from engineaudit.detector import FeatureUsage
from engineaudit.errors import MissingEnginesError
from engineaudit.scanner import audit, scan_file, scan_project, scan_source


class RecordingDetector:
    """Reports one optional-chaining usage per file and remembers what it saw."""

    def __init__(self):
        self.calls = []

    def detect(self, source_code, filepath="<string>"):
        self.calls.append(filepath)
        return [FeatureUsage("optional chaining", "14.0.0", filepath, lineno=1)]


def test_scan_source_collects_usages():
    report = scan_source("var v = a?.b;", "lib/index.js")
    assert report.files == ["lib/index.js"]
    assert [u.name for u in report.usages] == ["optional chaining"]
    assert report.errors == []


def test_scan_source_isolates_syntax_errors():
    report = scan_source("function (", "bad.js")
    assert report.usages == []
    assert [e.filepath for e in report.errors] == ["bad.js"]


def test_scan_file_reports_unreadable_file(tmp_path):
    report = scan_file("missing.js", root=tmp_path)
    assert report.files_scanned == 1
    assert "could not read file" in report.errors[0].reason


def test_scan_file_reports_undecodable_file(tmp_path):
    (tmp_path / "latin1.js").write_bytes(b"var s = '\xe9';")
    report = scan_file("latin1.js", root=tmp_path)
    assert report.errors[0].filepath == "latin1.js"


def test_scan_project_continues_after_a_bad_file(make_project):
    project = make_project(files={
        "a.js": "var v = a?.b;",
        "b.js": "function (",
        "c.js": "var v = a ?? b;",
    })
    report = scan_project(["a.js", "b.js", "c.js"], root=project)

    assert report.files == ["a.js", "b.js", "c.js"]
    assert [u.file for u in report.usages] == ["a.js", "c.js"]
    assert [e.filepath for e in report.errors] == ["b.js"]


def test_scan_report_str_lists_usages_and_errors(make_project):
    project = make_project(files={"a.js": "var v = a?.b;", "b.js": "function ("})
    text = str(scan_project(["a.js", "b.js"], root=project))
    assert "Files scanned: 2" in text
    assert "a.js:1 optional chaining (Node.js 14.0.0)" in text
    assert "Could not analyze b.js" in text


def test_audit_flags_incompatible_usage(make_project):
    project = make_project(
        engines={"node": ">=12"},
        files={"lib/index.js": "var v = a?.b;", "node_modules/x/index.js": "var v = a?.b;"},
    )
    result, report = audit(project)

    assert report.files == ["lib/index.js"]
    assert not result.overall_compatible
    assert result.incompatible[0].file == "lib/index.js"


def test_audit_uses_pluggable_detector(make_project):
    project = make_project(engines={"node": ">=14"}, files={"a.js": "", "b.js": ""})
    detector = RecordingDetector()
    result, _ = audit(project, detector=detector)

    assert detector.calls == ["a.js", "b.js"]
    assert result.overall_compatible


def test_audit_without_engines_scans_nothing(make_project):
    project = make_project(manifest={"name": "demo"}, files={"a.js": "var v = a?.b;"})
    detector = RecordingDetector()

    with pytest.raises(MissingEnginesError):
        audit(project, detector=detector)
    assert detector.calls == []


class BrokenDetector:
    """Fails on one file with an unexpected exception."""

    def detect(self, source_code, filepath="<string>"):
        if filepath == "b.js":
            raise RuntimeError("detector crashed")
        return [FeatureUsage("optional chaining", "14.0.0", filepath, lineno=1)]


def test_scan_source_isolates_unexpected_detector_errors():
    report = scan_source("", "b.js", detector=BrokenDetector())
    assert report.usages == []
    assert report.errors[0].filepath == "b.js"
    assert report.errors[0].reason == "RuntimeError: detector crashed"


def test_scan_project_continues_after_a_detector_crash(make_project):
    project = make_project(files={"a.js": "", "b.js": "", "c.js": ""})
    report = scan_project(["a.js", "b.js", "c.js"], detector=BrokenDetector(), root=project)

    assert [u.file for u in report.usages] == ["a.js", "c.js"]
    assert [e.filepath for e in report.errors] == ["b.js"]


def test_audit_accepts_resolved_paths_and_range(make_project):
    project = make_project(manifest={"name": "demo"}, files={"a.js": "", "b.js": ""})
    detector = RecordingDetector()
    result, report = audit(project, detector=detector, paths=["b.js"], declared_range=">=12")

    assert detector.calls == ["b.js"]
    assert report.files == ["b.js"]
    assert not result.overall_compatible
