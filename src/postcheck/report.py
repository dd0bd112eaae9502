"""Console summary and JSON persistence of verification reports."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import TextIO

from postcheck.core.log import logger
from postcheck.core.result import CheckResult, Report

RULE = "═" * 50
PASS_MARK = "✅"
FAIL_MARK = "❌"
EXCERPT_LINES = 5


class ReportWriteError(Exception):
    """The report file could not be written.

    Distinct from check failures: the results only exist on the
    console.
    """


def safe_subject(subject: str) -> str:
    """Subject reduced to file-name-safe characters.

    '@scope/pkg' becomes '_scope_pkg'.
    """
    return re.sub(r"[^A-Za-z0-9._-]", "_", subject) or "unknown"


def report_path(output_dir: Path, filename: str, subject: str) -> Path:
    """Deterministic report location for a subject, so repeated runs
    overwrite the previous report."""
    return output_dir / filename.format(subject=safe_subject(subject))


def write_report(report: Report, path: Path) -> Path:
    """Write the report as indented JSON and return its path.

    Raises:
        ReportWriteError: If the directory or file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(f"Cannot write report {path}: {e}") from e
    logger.info("Report written", path=str(path))
    return path


class ConsoleReporter:
    """Human-readable progress and summary output."""

    def __init__(self, out: TextIO | None = None):
        self.out = out or sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.out, flush=True)

    def header(self, subject: str) -> None:
        self._print()
        self._print(f"Verifying migration: {subject}")
        self._print(RULE)

    def progress(self, result: CheckResult) -> None:
        mark = PASS_MARK if result.passed else FAIL_MARK
        self._print(f"  {mark} {result.label} ({result.duration_ms} ms)")

    def summary(self, report: Report) -> None:
        """Counts, then a short excerpt of every failure."""
        counts = report.summary
        self._print(RULE)
        self._print(
            f"Results: {counts.passed} passed, {counts.failed} failed "
            f"({counts.total} total)"
        )

        failures = report.failures
        if not failures:
            return

        self._print()
        self._print("Failed checks:")
        for result in failures:
            self._print()
            self._print(f"  {FAIL_MARK} {result.label}:")
            for line in result.output.splitlines()[:EXCERPT_LINES]:
                self._print(f"    {line}")

    def saved(self, path: Path) -> None:
        self._print()
        self._print(f"Full report: {path}")
