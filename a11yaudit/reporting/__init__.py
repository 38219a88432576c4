import json
from typing import Optional

from colorama import Fore, Style

from ..classifier import Classification
from ..events import EventLog
from ..models import Impact, RunSummary, ScanResult

IMPACT_COLORS = {
    Impact.CRITICAL: Fore.RED,
    Impact.SERIOUS: Fore.LIGHTRED_EX,
    Impact.MODERATE: Fore.YELLOW,
    Impact.MINOR: Fore.WHITE,
}


class ConsoleReporter:
    def __init__(self, stream=None):
        self.stream = stream

    def _print(self, text: str = ""):
        print(text, file=self.stream)

    def print_scan(self, scan: ScanResult, result: Classification):
        self._print(f"   Axe version: {scan.engine_version}")
        self._print(f"   Rules run: {scan.rules_run}  "
                    f"(passed {len(scan.passes)}, violations {len(scan.violations)}, "
                    f"incomplete {len(scan.incomplete)}, inapplicable {len(scan.inapplicable)})")

        if scan.incomplete:
            self._print(f"\n   {Fore.YELLOW}Incomplete checks (require manual review):{Style.RESET_ALL}")
            for idx, item in enumerate(scan.incomplete, 1):
                self._print(f"      {idx}. {item.id}: {item.description}")
                self._print(f"         Nodes: {len(item.nodes)}")

        if not result.effective_violations:
            self._print(f"\n   {Fore.GREEN}No accessibility violations found!{Style.RESET_ALL}")
            return

        counts = result.counts
        self._print(f"\n   {Fore.YELLOW}Found {result.violation_count} accessibility violations:{Style.RESET_ALL}")
        self._print(f"      Critical: {counts.critical}")
        self._print(f"      Serious: {counts.serious}")
        self._print(f"      Moderate: {counts.moderate}")
        self._print(f"      Minor: {counts.minor}")
        if counts.incomplete:
            self._print(f"      Incomplete (treated as violations): {counts.incomplete}")

        self._print("\n   Violation Details:")
        for idx, v in enumerate(result.effective_violations, 1):
            label = v.impact.value.upper() if v.impact else "INCOMPLETE"
            color = IMPACT_COLORS.get(v.impact, Fore.CYAN)
            self._print(f"\n   {color}{idx}. [{label}] {v.id}{Style.RESET_ALL}")
            self._print(f"      {v.description}")
            self._print(f"      Nodes affected: {len(v.nodes)}")
            self._print(f"      Help: {v.help_url}")

    def print_summary(self, summary: RunSummary):
        counts = summary.counts
        self._print("\n" + "=" * 60)
        self._print("ACCESSIBILITY TEST SUMMARY")
        self._print("=" * 60)
        self._print(f"Total Tests: {summary.total}")
        self._print(f"Passed: {Fore.GREEN}{summary.passed}{Style.RESET_ALL}")
        self._print(f"Failed: {Fore.RED}{summary.failed}{Style.RESET_ALL}")

        errored = [o for o in summary.outcomes if o.error]
        for o in errored:
            self._print(f"   {Fore.RED}- {o.test_name}: {o.error}{Style.RESET_ALL}")

        self._print("\nViolations by Severity:")
        self._print(f"  {IMPACT_COLORS[Impact.CRITICAL]}Critical: {counts.critical}{Style.RESET_ALL}")
        self._print(f"  {IMPACT_COLORS[Impact.SERIOUS]}Serious: {counts.serious}{Style.RESET_ALL}")
        self._print(f"  {IMPACT_COLORS[Impact.MODERATE]}Moderate: {counts.moderate}{Style.RESET_ALL}")
        self._print(f"  Minor: {counts.minor}")
        self._print(f"  Total: {summary.total_violations}")
        self._print(f"\nFail Threshold: {summary.fail_on} and above")
        self._print(f"Violations Meeting Threshold: {summary.total_failing}")
        self._print("=" * 60)

        if summary.total_failing:
            self._print(f"\n{Fore.RED}Tests failed: {summary.total_failing} violations at "
                        f"{summary.fail_on} level or above{Style.RESET_ALL}")
        else:
            self._print(f"\n{Fore.GREEN}All tests passed!{Style.RESET_ALL}")


def generate_json_report(summary: RunSummary, output_path: str, log: EventLog) -> Optional[str]:
    """Writes the run summary. Returns the path, or None if it could not be written."""
    try:
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, indent=2)
    except OSError as e:
        log.error("SUMMARY_REPORT_FAILED", f"Failed to write JSON summary: {e}", path=output_path, error=str(e))
        return None
    log.info("SUMMARY_REPORT", f"JSON summary written to: {output_path}", path=output_path)
    return output_path
