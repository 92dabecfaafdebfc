"""
engineaudit Scanner — Run the feature detector over a project's files.

Reads each file, extracts its feature usages and collects per-file failures,
then hands the usages to the compatibility engine together with the declared
engine range from package.json.

Usage:
    from engineaudit.scanner import audit, scan_file

    report = scan_file("lib/index.js")
    print(report)

    result, report = audit(".", include="dist/**/*.js")
    print(result.overall_compatible)
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from engineaudit.detector import FeatureDetector, FeatureUsage, TreeSitterDetector
from engineaudit.engine import AuditResult, evaluate
from engineaudit.errors import ExtractionError
from engineaudit.files import DEFAULT_INCLUDE, resolve
from engineaudit.manifest import declared_range_for

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    """Feature usages and failures collected from one or more source files."""
    usages: list[FeatureUsage] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    scan_time_ms: float = 0.0
    errors: list[ExtractionError] = field(default_factory=list)

    @property
    def files_scanned(self) -> int:
        return len(self.files)

    @property
    def total_usages(self) -> int:
        return len(self.usages)

    def extend(self, other: "ScanReport") -> None:
        self.usages.extend(other.usages)
        self.files.extend(other.files)
        self.errors.extend(other.errors)

    def __str__(self) -> str:
        lines = []
        lines.append("engineaudit Scan Report")
        lines.append(f"{'=' * 60}")
        lines.append(f"Files scanned: {self.files_scanned}")
        lines.append(f"Feature usages: {self.total_usages}")
        lines.append(f"Scan time: {self.scan_time_ms:.1f}ms")

        if self.errors:
            lines.append("\nErrors:")
            for err in self.errors:
                lines.append(f"  ⚠ {err}")

        if self.usages:
            lines.append("\nUsages:")
            lines.append(f"{'-' * 60}")
            for usage in self.usages:
                lines.append(
                    f"{usage.file}:{usage.lineno} {usage.name} "
                    f"(Node.js {usage.required_version})"
                )

        return "\n".join(lines)


def scan_source(
    source_code: str,
    filepath: str = "<string>",
    detector: Optional[FeatureDetector] = None,
) -> ScanReport:
    """Extract feature usages from a JavaScript source string.

    Args:
        source_code: JavaScript source code to scan.
        filepath: Source file path (for reporting).
        detector: Feature detector to use. Defaults to TreeSitterDetector.

    Returns:
        ScanReport with the usages, or the extraction error for this source.
        Any exception the detector raises is recorded as an ExtractionError
        for this source instead of propagating.
    """
    start = time.perf_counter()
    detector = detector or TreeSitterDetector()
    report = ScanReport(files=[filepath])

    try:
        report.usages.extend(detector.detect(source_code, filepath))
    except ExtractionError as e:
        report.errors.append(e)
    except Exception as e:
        # A failing detector costs only this file
        logger.debug("Detector failed on %s", filepath, exc_info=True)
        report.errors.append(ExtractionError(filepath, f"{type(e).__name__}: {e}"))

    report.scan_time_ms = (time.perf_counter() - start) * 1000
    return report


def scan_file(
    filepath: str | Path,
    detector: Optional[FeatureDetector] = None,
    root: str | Path = ".",
) -> ScanReport:
    """Extract feature usages from a single JavaScript file.

    Args:
        filepath: Path to the file, relative to root.
        detector: Feature detector to use.
        root: Directory relative paths are resolved against.

    Returns:
        ScanReport with the usages, or the read/extraction error for this file.
    """
    name = Path(filepath).as_posix()
    try:
        source_code = (Path(root) / filepath).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        report = ScanReport(files=[name])
        report.errors.append(ExtractionError(name, f"could not read file: {e}"))
        return report

    return scan_source(source_code, filepath=name, detector=detector)


def scan_project(
    paths: Iterable[str | Path],
    detector: Optional[FeatureDetector] = None,
    root: str | Path = ".",
) -> ScanReport:
    """Extract feature usages from every file in a list.

    One unreadable or unparseable file never stops the others from being
    scanned.

    Returns:
        Combined ScanReport for all files, in the order given.
    """
    start = time.perf_counter()
    detector = detector or TreeSitterDetector()
    combined = ScanReport()

    for path in paths:
        report = scan_file(path, detector=detector, root=root)
        logger.debug(
            "Scanned %s: %d usage(s) in %.1fms",
            report.files[0], report.total_usages, report.scan_time_ms,
        )
        combined.extend(report)

    combined.scan_time_ms = (time.perf_counter() - start) * 1000
    return combined


def audit(
    project_dir: str | Path = ".",
    include: str = DEFAULT_INCLUDE,
    exclude: Optional[str] = None,
    detector: Optional[FeatureDetector] = None,
    paths: Optional[list[Path]] = None,
    declared_range: Optional[str] = None,
) -> tuple[AuditResult, ScanReport]:
    """Audit a project's declared engine range against the features it uses.

    Args:
        project_dir: Directory holding package.json; globs are relative to it.
        include: Glob of files to check.
        exclude: Glob of files to leave out.
        detector: Feature detector to use.
        paths: Pre-resolved file list; skips glob resolution when given.
        declared_range: Already validated engine range; skips reading
            package.json when given.

    Returns:
        The engine's AuditResult and the ScanReport it was built from.

    Raises:
        ConfigurationError: If the declared range is missing or invalid.
            Raised before any file is read.
        FeatureDataError: If a detected feature carries a bad version.
    """
    if declared_range is None:
        declared_range = declared_range_for(project_dir)
    if paths is None:
        paths = resolve(include, exclude, root=project_dir)
    report = scan_project(paths, detector=detector, root=project_dir)
    logger.debug(
        "Scanned %d file(s), %d usage(s), %d error(s)",
        report.files_scanned, report.total_usages, len(report.errors),
    )
    return evaluate(declared_range, report.usages), report
