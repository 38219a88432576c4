import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

from colorama import Fore, Style, init

from . import __version__
from .config import load_config_file, resolve_config
from .engine import Engine
from .errors import UsageError
from .events import ConsoleSink, EventLog, JsonlFileSink

EPILOG = """
Examples:
  # Test a single URL
  a11yaudit --url https://example.com

  # Test with password protection
  a11yaudit --url https://example.com --password mypass

  # Test multiple scenarios from a config file (YAML or JSON)
  a11yaudit --config a11y.yaml

  # Use Firefox in non-headless mode
  a11yaudit --url https://example.com --browser firefox --headless false

Config file format:
  baseUrl: https://example.com
  password: optional-password
  outputDir: ./reports
  failOn: serious
  scenarios:
    - name: Homepage
      path: /
    - name: Search
      path: /search
      actions:
        - {type: fill, selector: "#q", value: "shoes"}
        - {type: click, selector: "button[type=submit]"}
        - {type: wait, duration: 1500}
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="a11yaudit",
        description="Accessibility audits (WCAG 2.0/2.1 A/AA) for live web pages using axe-core.",
        epilog=EPILOG,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=f"a11yaudit {__version__}")

    target_group = parser.add_argument_group("Targeting")
    target_group.add_argument("--url", help="URL to test (required if no config file)")
    target_group.add_argument("--password", help="Password for password-protected sites")
    target_group.add_argument("--config", help="YAML/JSON config file with test scenarios")
    target_group.add_argument("--name", help="Test name for report files")
    target_group.add_argument("--exclude", help="CSS selectors to exclude (comma-separated)")

    browser_group = parser.add_argument_group("Browser")
    browser_group.add_argument("--browser", help="chromium, firefox or webkit (default: chromium)")
    browser_group.add_argument("--headless", help="Run headless: true/false (default: true)")
    browser_group.add_argument("--axe-source", help="URL or local path of axe.min.js")

    verdict_group = parser.add_argument_group("Verdict")
    verdict_group.add_argument("--fail-on",
                               help="critical, serious, moderate, minor or all (default: serious)")
    verdict_group.add_argument("--treat-incomplete-as-violations", action="store_true", default=None,
                               help="Fold incomplete checks into the violation list")

    out_group = parser.add_argument_group("Reporting")
    out_group.add_argument("--output", help="Output directory for reports (default: ./a11y-reports)")
    out_group.add_argument("--summary-report", help="Path to a JSON run summary")
    out_group.add_argument("--log-file", help="Append structured events (JSON lines) to this file")
    out_group.add_argument("--verbose", action="store_true", default=None, help="Show debug events")
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """CLI flags as config keys. Flags left unset are None so the file value wins."""
    return {
        "url": args.url,
        "password": args.password,
        "name": args.name,
        "exclude": args.exclude,
        "browser": args.browser,
        "headless": args.headless,
        "axeSource": args.axe_source,
        "failOn": args.fail_on,
        "treatIncompleteAsViolations": args.treat_incomplete_as_violations,
        "outputDir": args.output,
        "summaryReport": args.summary_report,
        "logFile": args.log_file,
        "verbose": args.verbose,
    }


def main(argv: Optional[List[str]] = None) -> int:
    init(autoreset=True)
    parser = build_parser()
    args = parser.parse_args(argv)

    console = ConsoleSink()
    log = EventLog(sinks=[console])

    try:
        file_values = load_config_file(args.config) if args.config else None
        config = resolve_config(file_values, overrides_from_args(args), log)
    except UsageError as e:
        print(f"{Fore.RED}Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        parser.print_help()
        return 1

    console.verbose = config.verbose
    if config.log_file:
        log.add_sink(JsonlFileSink(config.log_file))

    print(f"{Style.BRIGHT}a11yaudit {__version__}{Style.RESET_ALL}")
    try:
        summary = asyncio.run(Engine(config, log).run())
    except KeyboardInterrupt:
        print(f"\n{Fore.RED}[!] Interrupted.{Style.RESET_ALL}")
        return 1
    except Exception as e:
        log.error("FATAL", f"Fatal error: {e}", error=str(e))
        return 1
    return summary.exit_code


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
