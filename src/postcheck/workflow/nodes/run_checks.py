"""RunChecks node - execute the planned checks in order."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from postcheck.core.config import State
from postcheck.report import ConsoleReporter
from postcheck.runner.check import CheckRunner


@dataclass
class RunChecks(BaseNode[State]):
    """Run every planned check sequentially, printing progress."""

    async def run(self, ctx: GraphRunContext[State]) -> Finalize:
        config = ctx.state.config
        run = ctx.state.runtime.verify

        runner = CheckRunner(
            config.project.workdir,
            timeout=config.check.timeout,
            pass_output_limit=config.check.pass_output_limit,
            fail_output_limit=config.check.fail_output_limit,
            log_dir=config.check.log_dir,
        )
        console = ConsoleReporter()
        console.header(run.package)

        run.results = runner.run_all(run.descriptors, on_result=console.progress)
        run.status = "checked"

        from postcheck.workflow.nodes.finalize import Finalize
        return Finalize()
