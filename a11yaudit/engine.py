from typing import Callable, List, Optional, Tuple

from .browser import BrowserSession, PageHandle
from .classifier import classify
from .events import EventLog
from .models import RunSummary, Scenario, TestConfig, TestOutcome
from .reporting import ConsoleReporter, generate_json_report
from .reporting.artifacts import ReportEmitter
from .scanner import AxeScanner, AxeSource, count_manual_issues, explain_link_name
from .stabilizer import stabilize

DEFAULT_TEST_NAME = "Accessibility Test"

Target = Tuple[str, str, Optional[Scenario]]


def join_path(base: str, path: str) -> str:
    """Appends ``path`` to ``base``; a leading '/' on ``path`` absorbs a trailing one on ``base``."""
    if base.endswith("/") and path.startswith("/"):
        return base + path[1:]
    return base + path


class Engine:
    """
    Runs the audit pipeline (stabilize -> scan -> classify -> report) once per
    scenario, sequentially, in one shared browser, and folds the outcomes into
    a RunSummary. A scenario failure is recorded and the batch moves on; only
    failing to start the browser aborts the run.
    """
    def __init__(self, config: TestConfig, log: Optional[EventLog] = None,
                 reporter: Optional[ConsoleReporter] = None,
                 session_factory: Callable[[str, bool], BrowserSession] = BrowserSession,
                 scanner: Optional[AxeScanner] = None,
                 emitter: Optional[ReportEmitter] = None):
        self.config = config
        self.log = log or EventLog()
        self.reporter = reporter or ConsoleReporter()
        self.session_factory = session_factory
        self.scanner = scanner or AxeScanner(AxeSource(config.axe_source))
        self.emitter = emitter or ReportEmitter(config.output_dir, config.browser)

    def targets(self) -> List[Target]:
        """(test name, resolved URL, scenario) for every test in declared order."""
        cfg = self.config
        if cfg.scenarios:
            base = cfg.base_url or cfg.url or ""
            return [(s.name or cfg.name or DEFAULT_TEST_NAME, join_path(base, s.path), s) for s in cfg.scenarios]
        return [(cfg.name or DEFAULT_TEST_NAME, cfg.url or cfg.base_url, None)]

    async def run(self) -> RunSummary:
        cfg = self.config
        self.log.info("RUN_START", "Starting Accessibility Tests", browser=cfg.browser, headless=cfg.headless,
                      output_dir=cfg.output_dir)
        self.log.info("RUN_CONFIG", f"Browser: {cfg.browser} | Headless: {cfg.headless} | Output: {cfg.output_dir}")
        if cfg.exclude:
            self.log.info("RUN_EXCLUDE", f"Excluding: {', '.join(cfg.exclude)}", exclude=list(cfg.exclude))

        targets = self.targets()
        if cfg.scenarios:
            self.log.info("RUN_SCENARIOS", f"Testing {len(targets)} scenario(s)...", count=len(targets))

        outcomes: List[TestOutcome] = []
        session = self.session_factory(cfg.browser, cfg.headless)
        try:
            await session.start()
            for test_name, url, scenario in targets:
                outcomes.append(await self.run_scenario(session, test_name, url, scenario))
        finally:
            await session.close()

        summary = RunSummary(tuple(outcomes), cfg.fail_on)
        self.reporter.print_summary(summary)
        if cfg.summary_report:
            generate_json_report(summary, cfg.summary_report, self.log)
        self.log.info("RUN_COMPLETE", f"Exit code {summary.exit_code}", passed=summary.passed,
                      failed=summary.failed, failing=summary.total_failing)
        return summary

    async def run_scenario(self, session: BrowserSession, test_name: str, url: str,
                           scenario: Optional[Scenario] = None) -> TestOutcome:
        self.log.info("SCENARIO_START", f"Testing: {test_name} ({url})", test=test_name, url=url)
        page, context = None, None
        try:
            page, context = await session.new_page()
            await stabilize(page, url, self.log, password=self.config.password,
                            actions=scenario.actions if scenario else ())
            return await self._scan_and_report(page, test_name, url)
        except Exception as e:
            message = str(e) or type(e).__name__
            self.log.error("SCENARIO_FAILED", f"Test failed: {message}", test=test_name, url=url, error=message)
            return TestOutcome(test_name=test_name, url=url, success=False, error=message)
        finally:
            if context is not None:
                try:
                    await session.close_page(page, context)
                except Exception as e:
                    self.log.warning("CONTEXT_CLOSE_FAILED", f"Could not close browser context: {e}")

    async def _scan_and_report(self, page: PageHandle, test_name: str, url: str) -> TestOutcome:
        cfg = self.config
        self.log.info("SCAN_START", f"Running accessibility scan on {page.url}", url=page.url)
        self.log.debug("PAGE_TITLE", f"Page title: {await page.title()}")

        manual = await count_manual_issues(page, self.log)
        scan = await self.scanner.scan(page, cfg.exclude)
        self.log.success("SCAN_COMPLETE", f"Scan complete (axe {scan.engine_version}, {scan.rules_run} rules)",
                         engine_version=scan.engine_version, violations=len(scan.violations),
                         passes=len(scan.passes), incomplete=len(scan.incomplete),
                         inapplicable=len(scan.inapplicable))
        await explain_link_name(page, scan, manual.get("linksWithoutText"), self.log)

        result = classify(scan, cfg.fail_on, cfg.treat_incomplete_as_violations)
        if cfg.treat_incomplete_as_violations and scan.incomplete:
            self.log.warning("INCOMPLETE_FOLDED", f"Treating {len(scan.incomplete)} incomplete checks as violations",
                             count=len(scan.incomplete))

        artifacts = await self.emitter.emit(
            page, scan, result.effective_violations,
            test_name=test_name, url=page.url or url, test_label=cfg.name or DEFAULT_TEST_NAME,
            treat_incomplete_as_violations=cfg.treat_incomplete_as_violations,
            manual_checks=manual,
        )
        self.log.info("REPORT_JSON", f"JSON report: {artifacts.json_path}", path=artifacts.json_path)
        self.log.info("REPORT_HTML", f"HTML report: {artifacts.html_path}", path=artifacts.html_path)
        self.log.info("REPORT_SCREENSHOT", f"Screenshot: {artifacts.screenshot_path}", path=artifacts.screenshot_path)

        self.reporter.print_scan(scan, result)
        return TestOutcome(
            test_name=test_name,
            url=url,
            success=result.success,
            violation_count=result.violation_count,
            counts=result.counts,
            failing_violation_count=result.failing_count,
            artifacts=artifacts.paths(),
        )
