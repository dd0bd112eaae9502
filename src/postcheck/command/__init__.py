"""CLI command modules for postcheck."""

from postcheck.command.plan import PlanCommand
from postcheck.command.verify import VerifyCommand

__all__ = ["PlanCommand", "VerifyCommand"]
