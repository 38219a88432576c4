import datetime
import json
import os
import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from ..browser import Screenshottable
from ..models import Finding, ScanResult
from .html import render_report

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def slugify(name: str) -> str:
    """Lowercase, whitespace runs -> '-', drop anything outside [a-z0-9-]."""
    slug = re.sub(r"\s+", "-", (name or "").lower())
    return re.sub(r"[^a-z0-9-]", "", slug) or "test"


def file_timestamp(moment: datetime.datetime) -> str:
    """ISO-8601 UTC with millisecond precision, ':' and '.' replaced by '-'."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return re.sub(r"[:.]", "-", iso)


def create_folder(path: str):
    if not os.path.exists(path):
        os.makedirs(path)


@dataclass(frozen=True)
class Artifacts:
    json_path: str
    html_path: str
    screenshot_path: str

    def paths(self) -> Tuple[str, str, str]:
        return (self.json_path, self.html_path, self.screenshot_path)


class ReportEmitter:
    """
    Writes the three per-test artifacts (JSON, HTML, PNG) under one base name:
    ``{slug}-{browser}-{timestamp}``. Writes are not transactional: if one
    fails, the files already written stay and the error propagates.
    """
    def __init__(self, output_dir: str, browser: str, clock: Optional[Clock] = None):
        self.output_dir = os.path.abspath(output_dir)
        self.browser = browser
        self.clock = clock or utc_now

    def base_name(self, test_name: str, moment: datetime.datetime) -> str:
        return f"{slugify(test_name)}-{self.browser}-{file_timestamp(moment)}"

    async def emit(self, page: Screenshottable, scan: ScanResult, violations: Sequence[Finding],
                   test_name: str, url: str, test_label: str,
                   treat_incomplete_as_violations: bool = False,
                   manual_checks: Optional[Dict[str, Optional[int]]] = None) -> Artifacts:
        create_folder(self.output_dir)
        moment = self.clock()
        base = os.path.join(self.output_dir, self.base_name(test_name, moment))
        artifacts = Artifacts(f"{base}.json", f"{base}.html", f"{base}.png")

        report = scan.to_dict()
        report["_meta"] = {
            "treatIncompleteAsViolations": treat_incomplete_as_violations,
            "allViolations": len(violations),
            "manualChecks": dict(manual_checks or {}),
        }
        with open(artifacts.json_path, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

        html = render_report(scan, violations, page_name=test_name, url=url, test_label=test_label,
                             generated=moment.astimezone())
        with open(artifacts.html_path, "w", encoding="utf-8") as f:
            f.write(html)

        await page.screenshot(artifacts.screenshot_path, full_page=True)
        return artifacts
