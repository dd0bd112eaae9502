#!/usr/bin/env python3
"""postcheck CLI - verify a project after a dependency change."""

import asyncio
import contextlib
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from postcheck.command.plan import PlanCommand
from postcheck.command.verify import VerifyCommand
from postcheck.core.config import State
from postcheck.core.log import logger


class CliState(State):
    """Post-change verification runner.

    Detects which checks apply to an npm project (install, type
    check, tests, lint, build, stale references after a package
    swap, deprecation warnings), runs each in its own process with a
    timeout, prints a summary and writes a JSON report. Exits
    non-zero if any check failed.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.check.timeout 60)
    2. postcheck.yaml in the current directory, --include files
    3. .env file
    4. Environment variables (POSTCHECK_CONFIG__CHECK__TIMEOUT=60)
    """

    verify: CliSubCommand[VerifyCommand]
    plan: CliSubCommand[PlanCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            # argparse exits 0 after printing help
            with contextlib.suppress(SystemExit):
                CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
