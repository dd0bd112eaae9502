"""Verify command - plan, run and report checks for a project."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic_graph import End

from postcheck.core.log import logger
from postcheck.manifest import ManifestError
from postcheck.report import ReportWriteError

if TYPE_CHECKING:
    from postcheck.core.config import State

EXIT_OK = 0
EXIT_CHECKS_FAILED = 1
EXIT_PRECONDITION = 2
EXIT_REPORT_NOT_WRITTEN = 3


class VerifyCommand(BaseModel):
    """Verify that the project still works after a dependency change.

    Runs dependency install, type check, tests, lint and build when
    the manifest declares them. With --swap-from, also checks that the
    replaced package is gone from the sources and the manifest.
    Writes migration-verify-<package>.json whatever the outcome.
    """

    model_config = ConfigDict(populate_by_name=True)

    package: str = Field(
        default="unknown",
        description="Package that was upgraded or swapped in",
    )
    swap_from: str | None = Field(
        default=None,
        alias="swap-from",
        description="Package that was replaced (enables swap checks)",
    )

    def apply(self, state: State) -> None:
        """Copy run arguments into runtime state."""
        state.runtime.verify.package = self.package
        state.runtime.verify.swap_from = self.swap_from

    async def run_workflow(self, state: State) -> int:
        """Run the verification workflow.

        Returns:
            0 if every check passed, 1 if any failed, 2 if the
            manifest could not be loaded, 3 if the report could not
            be written
        """
        self.apply(state)

        from postcheck.workflow.graph import create_workflow
        from postcheck.workflow.nodes.plan import Plan

        workflow = create_workflow()

        try:
            async with workflow.iter(Plan(), state=state) as run:
                async for node in run:
                    if isinstance(node, End):
                        return node.data
        except ManifestError as e:
            logger.error("Cannot verify: {error}", error=str(e))
            return EXIT_PRECONDITION
        except ReportWriteError as e:
            logger.error("{error}", error=str(e))
            return EXIT_REPORT_NOT_WRITTEN

        logger.error("Verification ended unexpectedly")
        return EXIT_CHECKS_FAILED
