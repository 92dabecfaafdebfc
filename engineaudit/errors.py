"""
engineaudit errors.

Configuration problems abort the run before any file is scanned. Extraction
problems are collected per file and never abort the run. Incompatibilities are
not errors at all; they are ordinary verdicts.
"""


class EngineAuditError(Exception):
    """Base class for every error raised by engineaudit."""


class ConfigurationError(EngineAuditError):
    """The project's declared engine range is missing or unusable."""


class ManifestNotFoundError(ConfigurationError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"No package.json found at {path}")


class ManifestParseError(ConfigurationError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not parse {path}: {reason}")


class MissingEnginesError(ConfigurationError):
    def __init__(self):
        super().__init__("No engines field in package.json")


class MissingNodeEngineError(ConfigurationError):
    def __init__(self):
        super().__init__("No node property of engines field")


class InvalidRangeError(ConfigurationError):
    def __init__(self, expr: str, reason: str = ""):
        self.expr = expr
        self.reason = reason
        message = f"'{expr}' is not a valid semver range"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class FeatureDataError(EngineAuditError):
    """A detected feature carries a required version that cannot be parsed."""

    def __init__(self, feature: str, required_version: str):
        self.feature = feature
        self.required_version = required_version
        super().__init__(
            f"Feature '{feature}' has an unparseable required version "
            f"'{required_version}'"
        )


class ExtractionError(EngineAuditError):
    """A single file could not be read or analyzed."""

    def __init__(self, filepath: str, reason: str):
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Could not analyze {filepath}: {reason}")
