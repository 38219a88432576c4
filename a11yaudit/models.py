from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Tuple, Union
from enum import Enum


class Impact(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SERIOUS = "serious"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return IMPACT_ORDER.index(self)

    @classmethod
    def parse(cls, value: Any) -> Optional["Impact"]:
        """Returns the matching Impact, or None for null/unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower()) if value else None
        except ValueError:
            return None


# Lowest to highest
IMPACT_ORDER = [Impact.MINOR, Impact.MODERATE, Impact.SERIOUS, Impact.CRITICAL]

FAIL_ALL = "all"
FAIL_LEVELS = [i.value for i in IMPACT_ORDER] + [FAIL_ALL]

BROWSERS = ["chromium", "firefox", "webkit"]


# --- Scenario actions ---

@dataclass(frozen=True)
class ClickAction:
    selector: str
    type: str = field(default="click", init=False)


@dataclass(frozen=True)
class FillAction:
    selector: str
    value: str
    type: str = field(default="fill", init=False)


@dataclass(frozen=True)
class WaitAction:
    duration_ms: int = 1000
    type: str = field(default="wait", init=False)


Action = Union[ClickAction, FillAction, WaitAction]


@dataclass(frozen=True)
class Scenario:
    name: str
    path: str = "/"
    actions: Tuple[Action, ...] = ()


@dataclass(frozen=True)
class TestConfig:
    url: Optional[str] = None
    base_url: Optional[str] = None
    password: Optional[str] = None
    output_dir: str = "./a11y-reports"
    name: Optional[str] = None
    browser: str = "chromium"
    headless: bool = True
    exclude: Tuple[str, ...] = ()
    fail_on: str = "serious"
    treat_incomplete_as_violations: bool = False
    scenarios: Tuple[Scenario, ...] = ()
    axe_source: str = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"
    log_file: Optional[str] = None
    summary_report: Optional[str] = None
    verbose: bool = False

    # Keeps pytest from collecting this as a test class
    __test__ = False


# --- Scan results ---

@dataclass(frozen=True)
class AffectedNode:
    html: str
    check_messages: Tuple[str, ...] = ()

    @classmethod
    def from_axe(cls, node: Dict[str, Any]) -> "AffectedNode":
        messages: List[str] = []
        for check in list(node.get("any") or []) + list(node.get("all") or []) + list(node.get("none") or []):
            text = (check.get("message") or "").strip() or (check.get("id") or "").strip()
            if text and text not in messages:
                messages.append(text)
        return cls(html=node.get("html", ""), check_messages=tuple(messages))


@dataclass(frozen=True)
class Finding:
    id: str
    help: str = ""
    description: str = ""
    help_url: str = ""
    impact: Optional[Impact] = None
    nodes: Tuple[AffectedNode, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_axe(cls, item: Dict[str, Any], incomplete: bool = False) -> "Finding":
        """Builds a Finding from one axe-core rule result.

        Results from the ``incomplete`` list carry no impact: they need manual
        review and are never ranked against a severity threshold.
        """
        return cls(
            id=item.get("id", "unknown"),
            help=item.get("help", ""),
            description=item.get("description", ""),
            help_url=item.get("helpUrl", ""),
            impact=None if incomplete else Impact.parse(item.get("impact")),
            nodes=tuple(AffectedNode.from_axe(n) for n in item.get("nodes") or []),
            raw=item,
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.raw:
            return self.raw
        return {
            "id": self.id,
            "impact": self.impact.value if self.impact else None,
            "help": self.help,
            "description": self.description,
            "helpUrl": self.help_url,
            "nodes": [
                {"html": n.html, "any": [{"id": m, "message": m} for m in n.check_messages], "all": [], "none": []}
                for n in self.nodes
            ],
        }


RESULT_KEYS = ("violations", "passes", "incomplete", "inapplicable")


@dataclass(frozen=True)
class ScanResult:
    violations: Tuple[Finding, ...] = ()
    passes: Tuple[Finding, ...] = ()
    incomplete: Tuple[Finding, ...] = ()
    inapplicable: Tuple[Finding, ...] = ()
    engine_version: str = "unknown"
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_axe(cls, raw: Dict[str, Any]) -> "ScanResult":
        engine = raw.get("testEngine") or {}
        return cls(
            violations=tuple(Finding.from_axe(v) for v in raw.get("violations") or []),
            passes=tuple(Finding.from_axe(v) for v in raw.get("passes") or []),
            incomplete=tuple(Finding.from_axe(v, incomplete=True) for v in raw.get("incomplete") or []),
            inapplicable=tuple(Finding.from_axe(v) for v in raw.get("inapplicable") or []),
            engine_version=engine.get("version", "unknown"),
            metadata={k: v for k, v in raw.items() if k not in RESULT_KEYS},
        )

    @property
    def rules_run(self) -> int:
        return len(self.violations) + len(self.passes) + len(self.incomplete) + len(self.inapplicable)

    def find(self, rule_id: str, bucket: str = "inapplicable") -> Optional[Finding]:
        return next((f for f in getattr(self, bucket) if f.id == rule_id), None)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.metadata)
        for key in RESULT_KEYS:
            data[key] = [f.to_dict() for f in getattr(self, key)]
        return data


# --- Outcomes ---

@dataclass(frozen=True)
class SeverityCounts:
    critical: int = 0
    serious: int = 0
    moderate: int = 0
    minor: int = 0
    incomplete: int = 0

    def __add__(self, other: "SeverityCounts") -> "SeverityCounts":
        return SeverityCounts(
            critical=self.critical + other.critical,
            serious=self.serious + other.serious,
            moderate=self.moderate + other.moderate,
            minor=self.minor + other.minor,
            incomplete=self.incomplete + other.incomplete,
        )


@dataclass(frozen=True)
class TestOutcome:
    test_name: str
    url: str
    success: bool
    violation_count: int = 0
    counts: SeverityCounts = field(default_factory=SeverityCounts)
    failing_violation_count: int = 0
    error: Optional[str] = None
    artifacts: Tuple[str, ...] = ()

    __test__ = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "testName": self.test_name,
            "url": self.url,
            "success": self.success,
            "violations": self.violation_count,
            "critical": self.counts.critical,
            "serious": self.counts.serious,
            "moderate": self.counts.moderate,
            "minor": self.counts.minor,
            "incomplete": self.counts.incomplete,
            "failingViolations": self.failing_violation_count,
            "artifacts": list(self.artifacts),
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class RunSummary:
    outcomes: Tuple[TestOutcome, ...]
    fail_on: str

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def counts(self) -> SeverityCounts:
        totals = SeverityCounts()
        for o in self.outcomes:
            totals = totals + o.counts
        return totals

    @property
    def total_violations(self) -> int:
        return sum(o.violation_count for o in self.outcomes)

    @property
    def total_failing(self) -> int:
        return sum(o.failing_violation_count for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.total_failing == 0 else 1

    def to_dict(self) -> Dict[str, Any]:
        counts = self.counts
        return {
            "summary": {
                "total": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "critical": counts.critical,
                "serious": counts.serious,
                "moderate": counts.moderate,
                "minor": counts.minor,
                "violations": self.total_violations,
                "failOn": self.fail_on,
                "failingViolations": self.total_failing,
                "exitCode": self.exit_code,
            },
            "results": [o.to_dict() for o in self.outcomes],
        }
