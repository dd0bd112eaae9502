"""Plan node - load the manifest and decide which checks to run."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from postcheck.core.config import State
from postcheck.core.log import logger
from postcheck.manifest import Manifest
from postcheck.planner import CheckPlanner, PlanOptions


@dataclass
class Plan(BaseNode[State]):
    """Load the manifest and plan the checks."""

    async def run(self, ctx: GraphRunContext[State]) -> RunChecks:
        """Plan checks for the configured project.

        Raises:
            ManifestError: If the manifest cannot be loaded; nothing
                runs and no report is written
        """
        run = ctx.state.runtime.verify
        manifest_path = ctx.state.config.project.manifest_path

        run.manifest = Manifest.load(manifest_path)
        run.descriptors = CheckPlanner(PlanOptions.from_state(ctx.state)).plan(
            run.manifest
        )
        run.status = "planned"

        logger.info(
            f"Planned {len(run.descriptors)} checks",
            manifest=str(manifest_path),
            checks=[d.label for d in run.descriptors],
        )

        from postcheck.workflow.nodes.run_checks import RunChecks
        return RunChecks()
