"""
engineaudit Range Arithmetic — npm-style semver ranges over the version line.

Parses range expressions as found in `package.json` engines fields and answers
two questions about them:
  1. Is a range expression valid?
  2. Do two range expressions share at least one version?

Each `||` branch of a range is reduced to a single interval on the ordered
version line (comparators inside a branch are intersected), so a range is a
union of intervals. Versions are ordered by semver precedence: the release
triple through packaging.version.Version, then the pre-release identifiers.

Supported syntax:
  - Primitive comparators: <, <=, >, >=, = and bare versions
  - X-ranges and partial versions: *, x, 10, 10.x, 10.2
  - Tilde ranges: ~1.2.3, ~1.2, ~1 (and the legacy ~> spelling)
  - Caret ranges: ^1.2.3, ^0.2.3, ^0.0.3, ^1.x
  - Hyphen ranges: 1.2.3 - 2.3.4, 1.2 - 2
"""

import re
from dataclasses import dataclass
from functools import lru_cache, total_ordering
from typing import Optional

from packaging.version import Version

from engineaudit.errors import InvalidRangeError


_VERSION_RE = re.compile(
    r"^v?=?\s*(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(r"^(?P<op><=|>=|<|>|=|~>|~|\^)?(?P<version>.*)$")
_HYPHEN_RE = re.compile(r"^(?P<low>\S+)\s+-\s+(?P<high>\S+)$")
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")
_NUMERIC_IDENTIFIER_RE = re.compile(r"^(0|[1-9]\d*)$")


@total_ordering
@dataclass(frozen=True)
class SemVer:
    """A semver version: a release triple plus optional pre-release identifiers.

    Precedence follows semver: releases compare numerically, a pre-release
    sorts below its release, and pre-release identifiers compare one by one
    (numeric ones numerically and below alphanumeric ones, which compare
    lexically). Build metadata is dropped.
    """
    release: Version
    prerelease: tuple[str, ...] = ()

    def _key(self) -> tuple:
        if not self.prerelease:
            return (self.release, 1)
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part)
            for part in self.prerelease
        )
        return (self.release, 0, identifiers)

    def __lt__(self, other: "SemVer") -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __str__(self) -> str:
        if self.prerelease:
            return f"{self.release}-{'.'.join(self.prerelease)}"
        return str(self.release)


def _split_prerelease(prerelease: str) -> tuple[str, ...]:
    identifiers = tuple(prerelease.split("."))
    for part in identifiers:
        if not part:
            raise ValueError(f"empty identifier in pre-release '{prerelease}'")
        if part.isdigit() and not _NUMERIC_IDENTIFIER_RE.match(part):
            raise ValueError(f"leading zero in pre-release identifier '{part}'")
    return identifiers


@lru_cache(maxsize=1024)
def _make_version(major: int, minor: int, patch: int, prerelease: Optional[str] = None) -> SemVer:
    identifiers = _split_prerelease(prerelease) if prerelease else ()
    return SemVer(Version(f"{major}.{minor}.{patch}"), identifiers)


@dataclass(frozen=True)
class Bound:
    """One end of an interval on the version line."""
    version: SemVer
    inclusive: bool


# Nothing sorts below 0.0.0 on the version line
FLOOR = Bound(_make_version(0, 0, 0), inclusive=True)


@dataclass(frozen=True)
class Interval:
    """A contiguous set of versions. `upper=None` means unbounded above."""
    lower: Bound = FLOOR
    upper: Optional[Bound] = None

    @property
    def is_empty(self) -> bool:
        if self.upper is None:
            return False
        if self.lower.version != self.upper.version:
            return self.lower.version > self.upper.version
        return not (self.lower.inclusive and self.upper.inclusive)

    def intersect(self, other: "Interval") -> "Interval":
        return Interval(
            lower=_max_lower(self.lower, other.lower),
            upper=_min_upper(self.upper, other.upper),
        )

    def contains(self, version: SemVer) -> bool:
        if version < self.lower.version or (
            version == self.lower.version and not self.lower.inclusive
        ):
            return False
        if self.upper is None:
            return True
        if version > self.upper.version:
            return False
        return version != self.upper.version or self.upper.inclusive

    def __str__(self) -> str:
        if self.is_empty:
            return "<0.0.0"
        if self.upper is not None and self.lower.version == self.upper.version:
            return str(self.lower.version)
        parts = []
        if self.lower != FLOOR:
            op = ">=" if self.lower.inclusive else ">"
            parts.append(f"{op}{self.lower.version}")
        if self.upper is not None:
            op = "<=" if self.upper.inclusive else "<"
            parts.append(f"{op}{self.upper.version}")
        return " ".join(parts) or "*"


EMPTY = Interval(upper=Bound(FLOOR.version, inclusive=False))


def _max_lower(a: Bound, b: Bound) -> Bound:
    if a.version != b.version:
        return a if a.version > b.version else b
    return Bound(a.version, a.inclusive and b.inclusive)


def _min_upper(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None:
        return b
    if b is None:
        return a
    if a.version != b.version:
        return a if a.version < b.version else b
    return Bound(a.version, a.inclusive and b.inclusive)


@dataclass(frozen=True)
class VersionRange:
    """A parsed range expression: a union of intervals, one per `||` branch."""
    raw: str
    intervals: tuple[Interval, ...]

    def intersects(self, other: "VersionRange") -> bool:
        return any(
            not a.intersect(b).is_empty
            for a in self.intervals
            for b in other.intervals
        )

    def contains(self, version: str | SemVer) -> bool:
        if not isinstance(version, SemVer):
            version = parse_version(version)
        return any(interval.contains(version) for interval in self.intervals)

    def __str__(self) -> str:
        return " || ".join(str(interval) for interval in self.intervals)


# =============================================================================
# Parsing
# =============================================================================

@dataclass(frozen=True)
class _Partial:
    """A possibly incomplete version; None marks a wildcard or missing part."""
    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    prerelease: Optional[str] = None

    def floor(self) -> SemVer:
        return _make_version(
            self.major or 0, self.minor or 0, self.patch or 0, self.prerelease,
        )


def _parse_partial(expr: str, text: str) -> _Partial:
    match = _VERSION_RE.match(text.strip())
    if not match:
        raise InvalidRangeError(expr, f"cannot parse version '{text}'")

    parts: list[Optional[int]] = []
    wildcard = False
    for key in ("major", "minor", "patch"):
        value = match[key]
        if wildcard or value is None or value in ("x", "X", "*"):
            wildcard = True
            parts.append(None)
        else:
            parts.append(int(value))

    prerelease = match["pre"]
    if prerelease and wildcard:
        raise InvalidRangeError(expr, f"pre-release on partial version '{text}'")

    partial = _Partial(parts[0], parts[1], parts[2], prerelease)
    try:
        partial.floor()
    except ValueError as e:
        raise InvalidRangeError(expr, str(e)) from e
    return partial


def _between(low: SemVer, high: SemVer) -> Interval:
    return Interval(Bound(low, True), Bound(high, False))


def _comparator_interval(op: str, p: _Partial) -> Interval:
    """Desugar one comparator (operator + partial version) into an interval."""
    major, minor, patch = p.major, p.minor, p.patch

    if op in ("", "="):
        if major is None:
            return Interval()
        if minor is None:
            return _between(_make_version(major, 0, 0), _make_version(major + 1, 0, 0))
        if patch is None:
            return _between(_make_version(major, minor, 0), _make_version(major, minor + 1, 0))
        exact = p.floor()
        return Interval(Bound(exact, True), Bound(exact, True))

    if op == ">":
        if major is None:
            return EMPTY
        if minor is None:
            return Interval(Bound(_make_version(major + 1, 0, 0), True))
        if patch is None:
            return Interval(Bound(_make_version(major, minor + 1, 0), True))
        return Interval(Bound(p.floor(), False))

    if op == ">=":
        if major is None:
            return Interval()
        return Interval(Bound(p.floor(), True))

    if op == "<":
        if major is None:
            return EMPTY
        return Interval(upper=Bound(p.floor(), False))

    if op == "<=":
        if major is None:
            return Interval()
        if minor is None:
            return Interval(upper=Bound(_make_version(major + 1, 0, 0), False))
        if patch is None:
            return Interval(upper=Bound(_make_version(major, minor + 1, 0), False))
        return Interval(upper=Bound(p.floor(), True))

    if op in ("~", "~>"):
        if major is None:
            return Interval()
        if minor is None:
            return _between(_make_version(major, 0, 0), _make_version(major + 1, 0, 0))
        return _between(p.floor(), _make_version(major, minor + 1, 0))

    # Caret: allow changes that do not modify the left-most non-zero part
    if major is None:
        return Interval()
    if minor is None:
        return _between(_make_version(major, 0, 0), _make_version(major + 1, 0, 0))
    if major > 0:
        upper = _make_version(major + 1, 0, 0)
    elif patch is None or minor > 0:
        upper = _make_version(0, minor + 1, 0)
    else:
        upper = _make_version(0, 0, patch + 1)
    return _between(p.floor(), upper)


def _hyphen_interval(low: _Partial, high: _Partial) -> Interval:
    lower = FLOOR if low.major is None else Bound(low.floor(), True)
    if high.major is None:
        upper = None
    elif high.minor is None:
        upper = Bound(_make_version(high.major + 1, 0, 0), False)
    elif high.patch is None:
        upper = Bound(_make_version(high.major, high.minor + 1, 0), False)
    else:
        upper = Bound(high.floor(), True)
    return Interval(lower, upper)


def _parse_comparator_set(expr: str, branch: str) -> Interval:
    text = branch.strip()

    hyphen = _HYPHEN_RE.match(text)
    if hyphen:
        return _hyphen_interval(
            _parse_partial(expr, hyphen["low"]),
            _parse_partial(expr, hyphen["high"]),
        )

    # ">= 10" is the same comparator as ">=10"
    text = _OPERATOR_SPACE_RE.sub(r"\1", text)

    interval = Interval()
    for token in text.split():
        match = _COMPARATOR_RE.match(token)
        op = match["op"] or ""
        interval = interval.intersect(
            _comparator_interval(op, _parse_partial(expr, match["version"]))
        )
    return interval


@lru_cache(maxsize=512)
def parse_range(expr: str) -> VersionRange:
    """Parse an npm-style range expression.

    Args:
        expr: Range expression, e.g. ">=10 <14 || >=16".

    Returns:
        The parsed VersionRange.

    Raises:
        InvalidRangeError: If the expression is not a valid range.
    """
    if not isinstance(expr, str):
        raise InvalidRangeError(str(expr), "expected a string")
    intervals = tuple(_parse_comparator_set(expr, branch) for branch in expr.split("||"))
    return VersionRange(raw=expr, intervals=intervals)


def parse_version(text: str) -> SemVer:
    """Parse a concrete (possibly partial) version such as "12" or "7.6.0".

    Missing minor/patch parts are filled with zeros. Wildcards are rejected
    in the major position since they do not name a version.

    Raises:
        InvalidRangeError: If the text is not a version.
    """
    if not isinstance(text, str):
        raise InvalidRangeError(str(text), "expected a version string")
    partial = _parse_partial(text, text)
    if partial.major is None:
        raise InvalidRangeError(text, "a wildcard is not a version")
    return partial.floor()


def valid_range(expr: str) -> Optional[str]:
    """Return the normalized form of a range, or None if it is invalid."""
    try:
        return str(parse_range(expr))
    except InvalidRangeError:
        return None


def is_valid(expr: str) -> bool:
    return valid_range(expr) is not None


def _coerce(value: str | VersionRange) -> VersionRange:
    if isinstance(value, VersionRange):
        return value
    return parse_range(value)


def intersects(a: str | VersionRange, b: str | VersionRange) -> bool:
    """Check whether two ranges share at least one version.

    Raises:
        InvalidRangeError: If either range is invalid.
    """
    return _coerce(a).intersects(_coerce(b))
