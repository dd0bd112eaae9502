"""Check runner: execute planned checks and reduce them to results."""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from postcheck.core.log import logger
from postcheck.core.result import CheckDescriptor, CheckResult, CheckStatus
from postcheck.core.runner import TIMED_OUT, Runner, render_command


def slugify(label: str) -> str:
    """File-name-safe form of a check label."""
    return re.sub(r"[^A-Za-z0-9._-]+", "-", label).strip("-").lower() or "check"


class CheckRunner:
    """Execute check commands one at a time.

    A failing, crashing or hanging command never raises; it becomes a
    CheckResult with status fail.
    """

    def __init__(
        self,
        workdir: Path,
        timeout: int = 120,
        pass_output_limit: int = 500,
        fail_output_limit: int = 1000,
        log_dir: Path | None = None,
    ):
        """Initialize check runner.

        Args:
            workdir: Working directory for check commands
            timeout: Per-check timeout in seconds
            pass_output_limit: Characters of stdout kept on success
            fail_output_limit: Characters of output kept on failure
            log_dir: Optional directory for full, untruncated logs
        """
        self.workdir = workdir
        self.timeout = timeout
        self.pass_output_limit = pass_output_limit
        self.fail_output_limit = fail_output_limit
        self.log_dir = log_dir
        self.runner = Runner()

    def run(self, descriptor: CheckDescriptor) -> CheckResult:
        """Run one check and capture its outcome."""
        log_file = None
        if self.log_dir:
            stamp = datetime.now().strftime('%Y%m%d-%H%M%S')
            log_file = self.log_dir / f"{slugify(descriptor.label)}-{stamp}.log"

        logger.info(
            "Running check: {label}",
            label=descriptor.label,
            command=render_command(descriptor.command),
        )
        start = time.monotonic()
        try:
            result = self.runner.execute(
                descriptor.command,
                cwd=self.workdir,
                timeout=self.timeout,
                log_file=log_file,
                log_level="spew",
            )
        except OSError as e:
            return self._failed(descriptor, start, f"Failed to start: {e}")

        if result.exited == TIMED_OUT:
            reason = f"Command timed out after {self.timeout} seconds"
            captured = result.stderr or result.stdout
            output = f"{reason}\n{captured}" if captured else reason
            return self._failed(descriptor, start, output)

        if result.exited != 0:
            reason = f"Command failed with exit code {result.exited}"
            return self._failed(
                descriptor, start, result.stderr or result.stdout or reason
            )

        return CheckResult(
            label=descriptor.label,
            status=CheckStatus.PASS,
            duration_ms=self._elapsed_ms(start),
            output=result.stdout[:self.pass_output_limit],
        )

    def run_all(
        self,
        descriptors: Iterable[CheckDescriptor],
        on_result: Callable[[CheckResult], None] | None = None,
    ) -> list[CheckResult]:
        """Run checks sequentially, in the given order.

        Args:
            descriptors: Planned checks
            on_result: Called after each check completes

        Returns:
            One result per descriptor, in descriptor order
        """
        results = []
        for descriptor in descriptors:
            result = self.run(descriptor)
            results.append(result)
            if on_result:
                on_result(result)
        return results

    def _failed(
        self, descriptor: CheckDescriptor, start: float, output: str
    ) -> CheckResult:
        logger.warning(
            "Check failed: {label}",
            label=descriptor.label,
            output=output[:200],
        )
        return CheckResult(
            label=descriptor.label,
            status=CheckStatus.FAIL,
            duration_ms=self._elapsed_ms(start),
            output=output[:self.fail_output_limit],
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)
