"""
engineaudit CLI — Check package.json engines.node against the code.

Usage:
    engine-audit                        # Check all .js files
    engine-audit 'dist/**/*.js'         # Check only compiled .js files
    engine-audit -e 'test/**' -v        # Skip tests, list checked files
"""

import argparse
import logging
import sys
from pathlib import Path

from engineaudit import __version__
from engineaudit.errors import ConfigurationError, FeatureDataError
from engineaudit.files import DEFAULT_INCLUDE, resolve
from engineaudit.manifest import declared_range_for
from engineaudit.reporter import (
    EXIT_CONFIG_ERROR,
    exit_code,
    render,
    render_configuration_error,
    render_files,
)
from engineaudit.scanner import audit

logger = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  engine-audit                  Check all .js files
  engine-audit 'dist/**/*.js'   Check only compiled .js files
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="engine-audit",
        description="Check that package.json engines.node covers the JavaScript features in use.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "include",
        nargs="?",
        default=DEFAULT_INCLUDE,
        help=f"Glob of files to check (default: {DEFAULT_INCLUDE})",
    )
    parser.add_argument("-e", "--exclude", default=None, help="Glob of files to skip")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="List the files being checked and enable debug logging",
    )
    parser.add_argument(
        "-C", "--project-dir",
        type=Path,
        default=Path("."),
        help="Directory containing package.json (default: current directory)",
    )
    parser.add_argument("--version", action="version", version=f"engine-audit {__version__}")
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        declared_range = declared_range_for(args.project_dir)
    except ConfigurationError as e:
        print(render_configuration_error(e))
        sys.exit(EXIT_CONFIG_ERROR)

    paths = resolve(args.include, args.exclude, root=args.project_dir)
    if args.verbose:
        for line in render_files(paths):
            print(line)

    try:
        result, report = audit(args.project_dir, paths=paths, declared_range=declared_range)
    except FeatureDataError as e:
        print(render_configuration_error(e))
        sys.exit(EXIT_CONFIG_ERROR)

    logger.debug("Audit finished in %.1fms", report.scan_time_ms)
    for line in render(result, report):
        print(line)
    sys.exit(exit_code(result, report))


if __name__ == "__main__":
    main()
