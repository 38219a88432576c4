import unittest
import sys
import os
import io
import json
import tempfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from a11yaudit.events import ConsoleSink, EventLog, JsonlFileSink


class TestEventLog(unittest.TestCase):
    def test_fans_out_to_sinks(self):
        seen = []
        log = EventLog(sinks=[seen.append], run_id="run-1")

        log.info("SCAN_START", "Running accessibility scan", url="https://example.com/")
        log.warning("ACTION_FAILED", "Action failed", error="boom")

        self.assertEqual([e.type for e in seen], ["SCAN_START", "ACTION_FAILED"])
        self.assertEqual(seen[0].run_id, "run-1")
        self.assertEqual(seen[0].data, {"url": "https://example.com/"})
        self.assertEqual(seen[1].level, "WARNING")
        self.assertEqual(log.events, seen)

    def test_run_id_generated(self):
        self.assertNotEqual(EventLog().run_id, EventLog().run_id)


class TestSinks(unittest.TestCase):
    def test_console_hides_debug_unless_verbose(self):
        out = io.StringIO()
        sink = ConsoleSink(stream=out)
        log = EventLog(sinks=[sink])

        log.debug("PAGE_TITLE", "Page title: Home")
        log.success("SCAN_COMPLETE", "Scan complete")
        self.assertNotIn("Page title", out.getvalue())
        self.assertIn("[+] Scan complete", out.getvalue())

        sink.verbose = True
        log.debug("PAGE_TITLE", "Page title: About")
        self.assertIn("[.] Page title: About", out.getvalue())

    def test_jsonl_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "events.jsonl")
            log = EventLog(sinks=[JsonlFileSink(path)], run_id="run-2")
            log.info("RUN_START", "Starting", browser="firefox")
            log.error("SCENARIO_FAILED", "Test failed", error="Timeout")

            with open(path, encoding="utf-8") as f:
                lines = [json.loads(line) for line in f]

        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0]["type"], "RUN_START")
        self.assertEqual(lines[0]["data"], {"browser": "firefox"})
        self.assertEqual(lines[1]["level"], "ERROR")
        self.assertEqual({l["run_id"] for l in lines}, {"run-2"})


if __name__ == '__main__':
    unittest.main()
