from dataclasses import dataclass
from typing import Tuple

from .models import FAIL_ALL, Finding, Impact, ScanResult, SeverityCounts


@dataclass(frozen=True)
class Classification:
    effective_violations: Tuple[Finding, ...]
    counts: SeverityCounts
    failing_count: int

    @property
    def success(self) -> bool:
        return self.failing_count == 0

    @property
    def violation_count(self) -> int:
        return len(self.effective_violations)


def effective_violations(scan: ScanResult, treat_incomplete_as_violations: bool) -> Tuple[Finding, ...]:
    if treat_incomplete_as_violations:
        return scan.violations + scan.incomplete
    return scan.violations


def count_by_severity(findings: Tuple[Finding, ...], incomplete: int = 0) -> SeverityCounts:
    return SeverityCounts(
        critical=sum(1 for f in findings if f.impact is Impact.CRITICAL),
        serious=sum(1 for f in findings if f.impact is Impact.SERIOUS),
        moderate=sum(1 for f in findings if f.impact is Impact.MODERATE),
        minor=sum(1 for f in findings if f.impact is Impact.MINOR),
        incomplete=incomplete,
    )


def count_failing(findings: Tuple[Finding, ...], fail_on: str) -> int:
    """
    Findings at or above ``fail_on``. With ``all`` every finding counts;
    otherwise a finding without an impact never meets the threshold.
    """
    if fail_on == FAIL_ALL:
        return len(findings)
    threshold = Impact(fail_on).rank
    return sum(1 for f in findings if f.impact is not None and f.impact.rank >= threshold)


def classify(scan: ScanResult, fail_on: str, treat_incomplete_as_violations: bool) -> Classification:
    findings = effective_violations(scan, treat_incomplete_as_violations)
    incomplete = len(scan.incomplete) if treat_incomplete_as_violations else 0
    return Classification(
        effective_violations=findings,
        counts=count_by_severity(findings, incomplete),
        failing_count=count_failing(findings, fail_on),
    )
