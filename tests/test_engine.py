import unittest
import sys
import os
import io
import json
import tempfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from a11yaudit.config import resolve_config
from a11yaudit.engine import DEFAULT_TEST_NAME, Engine
from a11yaudit.events import EventLog
from a11yaudit.models import ClickAction, Scenario, TestConfig
from a11yaudit.reporting import ConsoleReporter
from a11yaudit.reporting.html import SUCCESS_BANNER
from tests.fakes import FakePage, FakeScanner, FakeSession, axe_finding, axe_result


class EngineTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.out = io.StringIO()

    def make_engine(self, config, pages, start_error=None):
        self.session = FakeSession(pages, start_error=start_error)
        self.scanner = FakeScanner()
        self.log = EventLog()
        engine = Engine(config, self.log, reporter=ConsoleReporter(stream=self.out),
                        session_factory=lambda browser, headless: self.session,
                        scanner=self.scanner)
        return engine

    def config(self, **kwargs):
        kwargs.setdefault("output_dir", self.tmp.name)
        return TestConfig(**kwargs)


class TestTargets(EngineTestCase):
    def test_single_url(self):
        engine = self.make_engine(self.config(url="https://example.com/"), [])
        self.assertEqual(engine.targets(), [(DEFAULT_TEST_NAME, "https://example.com/", None)])

    def test_base_url_without_scenarios(self):
        engine = self.make_engine(self.config(base_url="https://example.com", name="Smoke"), [])
        self.assertEqual(engine.targets(), [("Smoke", "https://example.com", None)])

    def test_scenario_urls_are_joined_to_base(self):
        home = Scenario("Home", "/")
        about = Scenario("About", "/about")
        engine = self.make_engine(self.config(base_url="https://example.com/", scenarios=(home, about)), [])

        self.assertEqual(engine.targets(), [
            ("Home", "https://example.com/", home),
            ("About", "https://example.com/about", about),
        ])

    def test_relative_path_keeps_base_slash(self):
        docs = Scenario("Docs", "docs")
        engine = self.make_engine(self.config(base_url="https://example.com/app/", scenarios=(docs,)), [])
        self.assertEqual(engine.targets()[0][1], "https://example.com/app/docs")

    def test_path_appended_as_written(self):
        scenarios = (Scenario("Docs", "/docs"), Scenario("Query", "?page=2"))
        engine = self.make_engine(self.config(base_url="https://example.com/app", scenarios=scenarios), [])
        self.assertEqual([t[1] for t in engine.targets()],
                         ["https://example.com/app/docs", "https://example.com/app?page=2"])

    def test_unnamed_scenario_takes_configured_name(self):
        config = resolve_config({"baseUrl": "https://example.com", "name": "Smoke",
                                 "scenarios": [{"path": "/"}, {"name": "About", "path": "/about"}]})
        engine = self.make_engine(config, [])
        self.assertEqual([t[0] for t in engine.targets()], ["Smoke", "About"])

    def test_unnamed_scenario_without_configured_name(self):
        config = resolve_config({"baseUrl": "https://example.com", "scenarios": [{"path": "/"}]})
        self.assertEqual(self.make_engine(config, []).targets()[0][0], DEFAULT_TEST_NAME)


class TestRun(EngineTestCase):
    async def test_clean_page_passes(self):
        page = FakePage(axe=axe_result(passes=[axe_finding("html-has-lang", None)]))
        engine = self.make_engine(self.config(url="https://example.com/"), [page])

        summary = await engine.run()

        self.assertEqual(summary.exit_code, 0)
        self.assertEqual(summary.passed, 1)
        outcome = summary.outcomes[0]
        self.assertTrue(outcome.success)
        self.assertEqual(outcome.violation_count, 0)
        self.assertEqual(len(outcome.artifacts), 3)
        with open(outcome.artifacts[1], encoding="utf-8") as f:
            self.assertIn(SUCCESS_BANNER, f.read())
        self.assertTrue(self.session.closed)
        self.assertTrue(page.closed)

    async def test_failing_severity_sets_exit_code(self):
        page = FakePage(axe=axe_result(violations=[
            axe_finding("image-alt", "critical"), axe_finding("region", "moderate"),
        ]))
        engine = self.make_engine(self.config(url="https://example.com/"), [page])

        summary = await engine.run()

        outcome = summary.outcomes[0]
        self.assertFalse(outcome.success)
        self.assertEqual(outcome.violation_count, 2)
        self.assertEqual(outcome.failing_violation_count, 1)
        self.assertEqual(summary.exit_code, 1)

        with open(outcome.artifacts[0], encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(len(data["violations"]), 2)
        self.assertEqual(data["_meta"]["allViolations"], 2)

    async def test_scenario_error_does_not_stop_the_batch(self):
        ok = FakePage(axe=axe_result(violations=[axe_finding("region", "minor")]))
        slow = FakePage(goto_error=TimeoutError("Timeout 60000ms exceeded"))
        scenarios = (Scenario("Home", "/"), Scenario("Blog", "/blog"))
        engine = self.make_engine(self.config(base_url="https://example.com", scenarios=scenarios), [ok, slow])

        summary = await engine.run()

        self.assertEqual(summary.total, 2)
        self.assertEqual(summary.passed, 1)
        self.assertEqual(summary.failed, 1)
        broken = summary.outcomes[1]
        self.assertEqual(broken.url, "https://example.com/blog")
        self.assertEqual(broken.error, "Timeout 60000ms exceeded")
        self.assertEqual(broken.artifacts, ())
        # A broken scenario alone does not fail the run
        self.assertEqual(summary.exit_code, 0)
        self.assertEqual(self.session.contexts_opened, self.session.contexts_closed)
        self.assertTrue(slow.closed)
        self.assertEqual(len(self.log.of_type("SCENARIO_FAILED")), 1)

    async def test_scan_error_is_recorded(self):
        page = FakePage(axe=RuntimeError("axe-core is not loaded in the page"))
        engine = self.make_engine(self.config(url="https://example.com/"), [page])

        summary = await engine.run()

        self.assertIn("axe-core is not loaded", summary.outcomes[0].error)
        self.assertEqual(os.listdir(self.tmp.name), [])

    async def test_exclusions_and_actions_reach_the_page(self):
        page = FakePage()
        scenario = Scenario("Menu", "/", actions=(ClickAction("#menu"),))
        config = self.config(base_url="https://example.com", scenarios=(scenario,), exclude=("#chat-widget",))
        engine = self.make_engine(config, [page])

        await engine.run()

        self.assertEqual(self.scanner.excludes, [("#chat-widget",)])
        self.assertIn("#menu", [c[1] for c in page.calls if c[0] == "click"])

    async def test_incomplete_folding(self):
        page = FakePage(axe=axe_result(incomplete=[axe_finding("color-contrast", "serious")]))
        config = self.config(url="https://example.com/", treat_incomplete_as_violations=True)
        engine = self.make_engine(config, [page])

        summary = await engine.run()

        outcome = summary.outcomes[0]
        self.assertEqual(outcome.violation_count, 1)
        self.assertEqual(outcome.counts.incomplete, 1)
        self.assertEqual(outcome.failing_violation_count, 0)
        self.assertTrue(outcome.success)
        self.assertEqual(len(self.log.of_type("INCOMPLETE_FOLDED")), 1)

    async def test_browser_start_failure_aborts(self):
        engine = self.make_engine(self.config(url="https://example.com/"), [],
                                  start_error=RuntimeError("Executable doesn't exist"))

        with self.assertRaises(RuntimeError):
            await engine.run()
        self.assertTrue(self.session.closed)

    async def test_summary_report_written(self):
        path = os.path.join(self.tmp.name, "summary.json")
        engine = self.make_engine(self.config(url="https://example.com/", summary_report=path), [FakePage()])

        await engine.run()

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data["summary"]["total"], 1)


if __name__ == '__main__':
    unittest.main()
