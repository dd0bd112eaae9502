"""Plan command - show which checks would run, without running them."""

from __future__ import annotations

from typing import TYPE_CHECKING

from postcheck.command.verify import EXIT_OK, EXIT_PRECONDITION, VerifyCommand
from postcheck.core.log import logger
from postcheck.core.runner import render_command
from postcheck.manifest import Manifest, ManifestError
from postcheck.planner import CheckPlanner, PlanOptions

if TYPE_CHECKING:
    from postcheck.core.config import State


class PlanCommand(VerifyCommand):
    """List the checks verify would run, with their commands."""

    async def run_workflow(self, state: State) -> int:
        self.apply(state)
        try:
            manifest = Manifest.load(state.config.project.manifest_path)
        except ManifestError as e:
            logger.error("Cannot plan: {error}", error=str(e))
            return EXIT_PRECONDITION

        state.runtime.verify.descriptors = CheckPlanner(
            PlanOptions.from_state(state)
        ).plan(manifest)

        for index, check in enumerate(state.runtime.verify.descriptors, 1):
            print(f"{index}. {check.label}")
            print(f"   {render_command(check.command)}")
        return EXIT_OK
