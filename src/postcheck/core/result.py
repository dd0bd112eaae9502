"""Value objects for planned checks, their results and the report."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CheckStatus(str, Enum):
    """Outcome of a check. Timeouts and spawn errors are failures."""

    PASS = "pass"
    FAIL = "fail"


class CheckDescriptor(BaseModel):
    """A planned, not yet executed check."""

    model_config = ConfigDict(frozen=True)

    label: str
    command: tuple[str, ...]


class CheckResult(BaseModel):
    """Result of a check execution."""

    model_config = ConfigDict(frozen=True)

    label: str
    status: CheckStatus
    duration_ms: int = Field(ge=0)
    output: str = ""

    @property
    def passed(self) -> bool:
        return self.status is CheckStatus.PASS


class Summary(BaseModel):
    """Pass/fail counts for a run."""

    model_config = ConfigDict(frozen=True)

    passed: int = Field(ge=0)
    failed: int = Field(ge=0)
    total: int = Field(ge=0)

    @model_validator(mode="after")
    def _counts_add_up(self) -> Summary:
        if self.passed + self.failed != self.total:
            raise ValueError(
                f"passed ({self.passed}) + failed ({self.failed}) "
                f"!= total ({self.total})"
            )
        return self


class Report(BaseModel):
    """Terminal artifact of a run, in check execution order."""

    model_config = ConfigDict(frozen=True)

    subject: str
    timestamp: datetime
    summary: Summary
    checks: tuple[CheckResult, ...]

    @model_validator(mode="after")
    def _summary_matches_checks(self) -> Report:
        if self.summary.total != len(self.checks):
            raise ValueError(
                f"summary total {self.summary.total} does not match "
                f"{len(self.checks)} checks"
            )
        return self

    @classmethod
    def from_results(
        cls,
        subject: str,
        results: list[CheckResult],
        timestamp: datetime | None = None,
    ) -> Report:
        """Assemble a report, computing the summary from results."""
        passed = sum(1 for r in results if r.passed)
        return cls(
            subject=subject,
            timestamp=timestamp or datetime.now(UTC),
            summary=Summary(
                passed=passed,
                failed=len(results) - passed,
                total=len(results),
            ),
            checks=tuple(results),
        )

    @property
    def failures(self) -> list[CheckResult]:
        return [r for r in self.checks if not r.passed]
