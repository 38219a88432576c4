import unittest
import sys
import os
import json
import tempfile

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from a11yaudit.config import load_config_file, merge_layers, resolve_config
from a11yaudit.errors import UsageError
from a11yaudit.events import EventLog
from a11yaudit.models import ClickAction, FillAction, WaitAction
from a11yaudit.scenarios import parse_scenarios


class TestResolveConfig(unittest.TestCase):
    def test_defaults(self):
        config = resolve_config(None, {"url": "https://example.com"})

        self.assertEqual(config.url, "https://example.com")
        self.assertEqual(config.output_dir, "./a11y-reports")
        self.assertEqual(config.browser, "chromium")
        self.assertTrue(config.headless)
        self.assertEqual(config.exclude, ())
        self.assertEqual(config.fail_on, "serious")
        self.assertFalse(config.treat_incomplete_as_violations)
        self.assertEqual(config.scenarios, ())

    def test_override_beats_file_beats_default(self):
        file_values = {"baseUrl": "https://example.com", "browser": "firefox", "failOn": "minor",
                       "outputDir": "./file-reports"}
        overrides = {"browser": "webkit", "failOn": None, "outputDir": None}

        config = resolve_config(file_values, overrides)

        self.assertEqual(config.browser, "webkit")
        self.assertEqual(config.fail_on, "minor")
        self.assertEqual(config.output_dir, "./file-reports")

    def test_empty_override_list_keeps_file_value(self):
        merged = merge_layers({"exclude": ["#ads"]}, {"exclude": []})
        self.assertEqual(merged["exclude"], ["#ads"])

    def test_string_values_are_normalized(self):
        config = resolve_config(None, {
            "url": "https://example.com",
            "exclude": " #chat-widget , .ads ,,",
            "headless": "false",
            "failOn": "ALL",
        })

        self.assertEqual(config.exclude, ("#chat-widget", ".ads"))
        self.assertFalse(config.headless)
        self.assertEqual(config.fail_on, "all")

    def test_unknown_key_is_ignored_with_warning(self):
        log = EventLog()
        resolve_config({"url": "https://example.com", "timeout": 5}, None, log)
        self.assertEqual(len(log.of_type("CONFIG_KEY_IGNORED")), 1)

    def test_nothing_to_test(self):
        with self.assertRaises(UsageError):
            resolve_config({}, {})

    def test_scenarios_need_a_base(self):
        with self.assertRaises(UsageError):
            resolve_config({"scenarios": [{"name": "Home", "path": "/"}]})

    def test_bad_enum_values(self):
        with self.assertRaises(UsageError):
            resolve_config(None, {"url": "https://example.com", "browser": "edge"})
        with self.assertRaises(UsageError):
            resolve_config(None, {"url": "https://example.com", "failOn": "blocker"})


class TestScenarioParsing(unittest.TestCase):
    def test_actions(self):
        log = EventLog()
        scenarios = parse_scenarios([
            {"name": "Search", "path": "/search", "actions": [
                {"type": "fill", "selector": "#q", "value": "shoes"},
                {"type": "click", "selector": "button[type=submit]"},
                {"type": "wait", "duration": 1500},
                {"type": "wait"},
                {"type": "hover", "selector": "#menu"},
            ]},
            {"path": "/about"},
        ], log)

        self.assertEqual(len(scenarios), 2)
        self.assertEqual(scenarios[0].actions, (
            FillAction("#q", "shoes"),
            ClickAction("button[type=submit]"),
            WaitAction(1500),
            WaitAction(1000),
        ))
        self.assertEqual(scenarios[1].name, "")
        self.assertEqual(scenarios[1].actions, ())
        self.assertEqual(len(log.of_type("ACTION_IGNORED")), 1)

    def test_unnamed_scenario_label_in_warnings(self):
        log = EventLog()
        scenarios = parse_scenarios([{"path": "/"}, {"path": "/x", "actions": [{"type": "hover"}]}], log)

        self.assertEqual(scenarios[1].name, "")
        self.assertEqual(log.of_type("ACTION_IGNORED")[0].data["scenario"], "Scenario 2")

    def test_malformed_action(self):
        with self.assertRaises(UsageError):
            parse_scenarios([{"name": "Broken", "actions": [{"type": "click"}]}])

    def test_scenarios_must_be_a_list(self):
        with self.assertRaises(UsageError):
            parse_scenarios({"name": "Home"})


class TestLoadConfigFile(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_json(self):
        path = self._write("a11y.json", json.dumps({
            "baseUrl": "https://example.com",
            "scenarios": [{"name": "Homepage", "path": "/"}],
        }))
        config = resolve_config(load_config_file(path))

        self.assertEqual(config.base_url, "https://example.com")
        self.assertEqual(config.scenarios[0].name, "Homepage")

    def test_yaml(self):
        path = self._write("a11y.yaml", "baseUrl: https://example.com\nfailOn: critical\nheadless: false\n")
        data = load_config_file(path)
        self.assertEqual(data, {"baseUrl": "https://example.com", "failOn": "critical", "headless": False})

    def test_missing_file(self):
        with self.assertRaises(UsageError):
            load_config_file(os.path.join(self.tmp.name, "nope.yaml"))

    def test_malformed_file(self):
        path = self._write("bad.yaml", "baseUrl: [unclosed\n")
        with self.assertRaises(UsageError):
            load_config_file(path)

    def test_top_level_must_be_mapping(self):
        path = self._write("list.yaml", "- a\n- b\n")
        with self.assertRaises(UsageError):
            load_config_file(path)


if __name__ == '__main__':
    unittest.main()
