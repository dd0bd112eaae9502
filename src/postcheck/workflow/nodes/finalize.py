"""Finalize node - assemble, print and persist the report."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from postcheck.core.config import State
from postcheck.core.log import logger
from postcheck.core.result import Report
from postcheck.report import ConsoleReporter, report_path, write_report


@dataclass
class Finalize(BaseNode[State, None, int]):
    """Build the report, print the summary and write the JSON file."""

    async def run(self, ctx: GraphRunContext[State]) -> End[int]:
        """Complete the run.

        Returns:
            End[int]: 1 if any check failed, else 0

        Raises:
            ReportWriteError: If the report cannot be persisted
        """
        config = ctx.state.config
        run = ctx.state.runtime.verify

        run.report = Report.from_results(run.package, run.results)

        console = ConsoleReporter()
        console.summary(run.report)

        output_dir = config.report.output_dir or config.project.workdir
        run.report_path = write_report(
            run.report,
            report_path(output_dir, config.report.filename, run.package),
        )
        console.saved(run.report_path)
        run.status = "complete"

        summary = run.report.summary
        logger.info(
            "Verification complete",
            passed=summary.passed,
            failed=summary.failed,
            total=summary.total,
        )
        return End(1 if summary.failed else 0)
