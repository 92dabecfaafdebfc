"""Shared fixtures: throwaway JavaScript projects on disk."""

import json
from pathlib import Path

import pytest


@pytest.fixture
def make_project(tmp_path):
    """Create a project directory with a package.json and source files.

    `manifest=None` leaves package.json out entirely.
    """

    def _make(files=None, manifest=None, engines=None):
        if manifest is None and engines is not None:
            manifest = {"name": "demo", "version": "1.0.0", "engines": engines}
        if manifest is not None:
            (tmp_path / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
        for name, content in (files or {}).items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make
