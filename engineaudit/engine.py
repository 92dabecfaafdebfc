"""
engineaudit Compatibility Engine — Decide whether a declared engine range is
safe for every feature a project uses.

A usage requiring Node.js version v is incompatible with a declared range R
if and only if R shares at least one version with "<v", the versions known
to lack the feature. The check is conservative: one claimed-but-broken
version is enough to flag the usage.

The engine performs no I/O and keeps no state between calls; the declared
range is always passed in explicitly.

Usage:
    from engineaudit.engine import evaluate

    result = evaluate(">=10", usages)
    if not result.overall_compatible:
        for verdict in result.incompatible:
            print(verdict.file, verdict.feature.name)
"""

from dataclasses import dataclass
from typing import Iterable

from engineaudit.detector import FeatureUsage
from engineaudit.errors import FeatureDataError, InvalidRangeError
from engineaudit.ranges import VersionRange, parse_range, parse_version


@dataclass(frozen=True)
class Verdict:
    """The compatibility outcome for one feature usage."""
    file: str
    feature: FeatureUsage
    compatible: bool
    deficient_range: str      # e.g. "<14.0.0"


@dataclass(frozen=True)
class AuditResult:
    """All verdicts for one run against one declared range."""
    declared_range: str
    verdicts: tuple[Verdict, ...] = ()

    @property
    def overall_compatible(self) -> bool:
        return all(v.compatible for v in self.verdicts)

    @property
    def incompatible(self) -> tuple[Verdict, ...]:
        return tuple(v for v in self.verdicts if not v.compatible)


def deficient_range(required_version: str) -> str:
    """The range of versions strictly below a feature's required version."""
    return f"<{required_version}"


def _deficient_for(usage: FeatureUsage) -> VersionRange:
    try:
        parse_version(usage.required_version)
        return parse_range(deficient_range(usage.required_version))
    except InvalidRangeError as e:
        raise FeatureDataError(usage.name, usage.required_version) from e


def evaluate(declared_range: str | VersionRange, usages: Iterable[FeatureUsage]) -> AuditResult:
    """Evaluate every feature usage against the declared range.

    Args:
        declared_range: The project's declared engine range.
        usages: Feature usages from any number of files.

    Returns:
        AuditResult with one Verdict per usage, in input order.

    Raises:
        InvalidRangeError: If the declared range is invalid. Raised before
            any usage is examined.
        FeatureDataError: If a usage carries an unparseable required version.
    """
    declared = declared_range if isinstance(declared_range, VersionRange) else parse_range(declared_range)

    deficient_by_version: dict[str, VersionRange] = {}
    verdicts = []
    for usage in usages:
        deficient = deficient_by_version.get(usage.required_version)
        if deficient is None:
            deficient = _deficient_for(usage)
            deficient_by_version[usage.required_version] = deficient
        verdicts.append(Verdict(
            file=usage.file,
            feature=usage,
            compatible=not declared.intersects(deficient),
            deficient_range=deficient.raw,
        ))

    return AuditResult(declared_range=declared.raw, verdicts=tuple(verdicts))
