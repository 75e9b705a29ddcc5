"""Verdict models produced for every tested operation."""

from enum import Enum

from pydantic import BaseModel


class Outcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class EndpointVerdict(BaseModel):
    """Result of one operation attempt."""

    path: str
    method: str
    outcome: Outcome
    status_code: int | None = None
    duration_ms: float = 0.0
    error: str | None = None
    details: list[str] = []

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASSED

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILED

    @property
    def skipped(self) -> bool:
        return self.outcome is Outcome.SKIPPED


class RunSummary(BaseModel):
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @classmethod
    def from_verdicts(cls, verdicts: list[EndpointVerdict]) -> "RunSummary":
        summary = cls()
        for v in verdicts:
            if v.skipped:
                summary.skipped += 1
            elif v.passed:
                summary.passed += 1
            else:
                summary.failed += 1
        return summary

    @property
    def success(self) -> bool:
        return self.failed == 0

    def describe(self) -> str:
        parts = [f"{self.passed} passed", f"{self.failed} failed"]
        if self.skipped:
            parts.append(f"{self.skipped} skipped")
        return "Results: " + ", ".join(parts)
