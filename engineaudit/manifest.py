"""
engineaudit Manifest — Read the declared Node.js engine range from package.json.
"""

import json
import logging
from pathlib import Path
from typing import Any

from engineaudit.errors import (
    ManifestNotFoundError,
    ManifestParseError,
    MissingEnginesError,
    MissingNodeEngineError,
)
from engineaudit.ranges import parse_range

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


def load_manifest(project_dir: str | Path) -> dict[str, Any]:
    """Load and decode a project's package.json.

    Raises:
        ManifestNotFoundError: If there is no package.json.
        ManifestParseError: If it is not a JSON object.
    """
    path = Path(project_dir) / MANIFEST_NAME
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestNotFoundError(path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, str(e)) from e

    try:
        manifest = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, str(e)) from e

    if not isinstance(manifest, dict):
        raise ManifestParseError(path, "expected a JSON object")
    return manifest


def resolve_declared_range(manifest: dict[str, Any]) -> str:
    """Extract and validate `engines.node` from a decoded manifest.

    Raises:
        MissingEnginesError: If there is no engines field.
        MissingNodeEngineError: If engines has no non-empty string node property.
        InvalidRangeError: If engines.node is not a valid range.
    """
    engines = manifest.get("engines")
    if not isinstance(engines, dict):
        raise MissingEnginesError()

    engine = engines.get("node")
    if not isinstance(engine, str) or not engine.strip():
        raise MissingNodeEngineError()

    parse_range(engine)
    logger.debug("Declared engine range: %s", engine)
    return engine


def declared_range_for(project_dir: str | Path) -> str:
    """Load the project's manifest and return its validated engine range."""
    return resolve_declared_range(load_manifest(project_dir))
