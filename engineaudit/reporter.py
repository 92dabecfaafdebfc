"""
engineaudit Reporter — Render audit results for the console and pick an exit code.
"""

import textwrap
from pathlib import Path
from typing import Iterable

from engineaudit.engine import AuditResult, Verdict
from engineaudit.ranges import parse_version
from engineaudit.scanner import ScanReport

SUCCESS = "✔"
ERROR = "✖"
WARNING = "⚠"

EXIT_OK = 0
EXIT_INCOMPATIBLE = 1
EXIT_CONFIG_ERROR = 2


def remediation_range(verdicts: Iterable[Verdict]) -> str:
    """The smallest `>=` range that makes every given usage legal."""
    highest = max(
        (v.feature.required_version for v in verdicts),
        key=parse_version,
    )
    return f">={highest}"


def _group_incompatible(result: AuditResult) -> dict[tuple[str, str], list[Verdict]]:
    # Same feature used many times in one file is reported once
    groups: dict[tuple[str, str], list[Verdict]] = {}
    for verdict in result.incompatible:
        groups.setdefault((verdict.file, verdict.feature.name), []).append(verdict)
    return groups


def render(result: AuditResult, report: ScanReport) -> list[str]:
    """Render incompatibilities, file errors and the summary line."""
    lines = []

    for (filepath, name), verdicts in _group_incompatible(result).items():
        first = verdicts[0].feature
        where = f"./{filepath}:{first.lineno}" if first.lineno else f"./{filepath}"
        count = f" ({len(verdicts)} occurrences)" if len(verdicts) > 1 else ""
        lines.append(
            f"{ERROR} {where} uses {name}{count} which is not supported "
            f"on all versions in the range {result.declared_range}"
        )
        lines.append(textwrap.indent(
            f"Remove the use of {name} or change the engine field to "
            f"{remediation_range(verdicts)}",
            "  ",
        ))

    for err in report.errors:
        lines.append(f"{WARNING} {err}")

    if not result.incompatible:
        if report.errors:
            lines.append(
                f"{ERROR} Audit incomplete: {len(report.errors)} file(s) "
                f"could not be analyzed"
            )
        else:
            lines.append(f"{SUCCESS} No incompatibilities found")

    return lines


def render_files(paths: Iterable[str | Path]) -> list[str]:
    """Render the resolved file list shown in verbose mode."""
    paths = [Path(p).as_posix() for p in paths]
    lines = [f"Checking {len(paths)} file(s):"]
    lines.extend(f"  ./{p}" for p in paths)
    return lines


def render_configuration_error(error: Exception) -> str:
    return f"{ERROR} {error}"


def exit_code(result: AuditResult, report: ScanReport) -> int:
    if result.incompatible or report.errors:
        return EXIT_INCOMPATIBLE
    return EXIT_OK
