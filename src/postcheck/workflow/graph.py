"""Graph workflow definition."""

from pydantic_graph import Graph

from postcheck.core.config import State
from postcheck.core.log import logger


def create_workflow():
    """Create the verification workflow graph.

    Plan -> RunChecks -> Finalize

    Returns:
        Graph workflow with State as state_type
    """
    logger.debug("Building workflow graph")

    from postcheck.workflow.nodes.finalize import Finalize
    from postcheck.workflow.nodes.plan import Plan
    from postcheck.workflow.nodes.run_checks import RunChecks

    return Graph(
        nodes=(Plan, RunChecks, Finalize),
        state_type=State,
    )
