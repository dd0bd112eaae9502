"""Workflow nodes for the verification graph."""

from postcheck.workflow.nodes.finalize import Finalize
from postcheck.workflow.nodes.plan import Plan
from postcheck.workflow.nodes.run_checks import RunChecks

__all__ = [
    "Plan",
    "RunChecks",
    "Finalize",
]
