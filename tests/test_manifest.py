"""Tests for reading engines.node from package.json."""

import pytest

from engineaudit.errors import (
    ConfigurationError,
    InvalidRangeError,
    ManifestNotFoundError,
    ManifestParseError,
    MissingEnginesError,
    MissingNodeEngineError,
)
from engineaudit.manifest import declared_range_for, load_manifest, resolve_declared_range


def test_declared_range_is_returned_verbatim(make_project):
    project = make_project(engines={"node": ">=10 <14 || >=16"})
    assert declared_range_for(project) == ">=10 <14 || >=16"


def test_missing_manifest(tmp_path):
    with pytest.raises(ManifestNotFoundError):
        load_manifest(tmp_path)


def test_malformed_json(tmp_path):
    (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ManifestParseError):
        load_manifest(tmp_path)


def test_manifest_must_be_an_object(tmp_path):
    (tmp_path / "package.json").write_text("[]", encoding="utf-8")
    with pytest.raises(ManifestParseError):
        load_manifest(tmp_path)


@pytest.mark.parametrize(
    "manifest, error",
    [
        ({"name": "demo"}, MissingEnginesError),
        ({"engines": None}, MissingEnginesError),
        ({"engines": {}}, MissingNodeEngineError),
        ({"engines": ">=10"}, MissingEnginesError),
        ({"engines": {"npm": ">=6"}}, MissingNodeEngineError),
        ({"engines": {"node": 10}}, MissingNodeEngineError),
        ({"engines": {"node": ""}}, MissingNodeEngineError),
        ({"engines": {"node": "   "}}, MissingNodeEngineError),
        ({"engines": {"node": "ten or newer"}}, InvalidRangeError),
    ],
)
def test_configuration_errors(manifest, error):
    with pytest.raises(error) as excinfo:
        resolve_declared_range(manifest)
    assert isinstance(excinfo.value, ConfigurationError)


def test_error_messages():
    assert str(MissingEnginesError()) == "No engines field in package.json"
    assert str(MissingNodeEngineError()) == "No node property of engines field"
    assert str(InvalidRangeError("abc")) == "'abc' is not a valid semver range"
