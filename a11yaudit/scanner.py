import asyncio
import os
from typing import Any, Dict, List, Optional, Sequence

import requests

from .browser import PageHandle
from .errors import ScanError
from .events import EventLog
from .models import ScanResult

# WCAG 2.0/2.1 A + AA, plus best-practice and experimental rules
AXE_TAGS = ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa", "best-practice", "experimental"]

AXE_RUN_SCRIPT = """
async ({ exclude, tags }) => {
    if (!window.axe || !window.axe.run) {
        return { error: 'axe-core is not loaded in the page' };
    }
    const context = exclude.length ? { exclude } : document;
    return await window.axe.run(context, { runOnly: { type: 'tag', values: tags } });
}
"""

AXE_PRESENT_SCRIPT = "() => typeof window.axe !== 'undefined' && typeof window.axe.run === 'function'"

LINKS_WITHOUT_TEXT_SCRIPT = """
links => links.filter(link => {
    const text = (link.textContent || '').trim();
    return !text && !link.getAttribute('aria-label') && !link.getAttribute('title')
        && !link.querySelector('img[alt]');
}).length
"""

LIST_ISSUES_SCRIPT = """
lists => lists.filter(list =>
    Array.from(list.children).some(child => !['LI', 'SCRIPT', 'TEMPLATE'].includes(child.tagName))
).length
"""

SAMPLE_LINKS_SCRIPT = """
links => links.slice(0, 10).map(link => ({
    href: link.getAttribute('href'),
    text: (link.textContent || '').trim(),
    ariaLabel: link.getAttribute('aria-label'),
    title: link.getAttribute('title'),
    hasImgWithAlt: !!link.querySelector('img[alt]'),
    innerHTML: link.innerHTML.substring(0, 100)
}))
"""


class AxeSource:
    """Loads the axe-core script once (URL via requests, or a local file) and caches it."""
    def __init__(self, location: str, timeout: float = 30.0):
        self.location = location
        self.timeout = timeout
        self._script: Optional[str] = None

    def load(self) -> str:
        if self._script is None:
            self._script = self._fetch()
        return self._script

    def _fetch(self) -> str:
        if self.location.startswith(("http://", "https://")):
            try:
                resp = requests.get(self.location, timeout=self.timeout)
                resp.raise_for_status()
            except requests.exceptions.RequestException as e:
                raise ScanError(f"Could not download axe-core from {self.location}: {e}") from e
            return resp.text

        path = os.path.expanduser(self.location)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            raise ScanError(f"Could not read axe-core from {path}: {e}") from e


class AxeScanner:
    def __init__(self, source: AxeSource, tags: Sequence[str] = AXE_TAGS):
        self.source = source
        self.tags = list(tags)

    async def scan(self, page: PageHandle, exclude: Sequence[str] = ()) -> ScanResult:
        """Runs axe-core against the current page. Any engine error raises."""
        if not await page.evaluate(AXE_PRESENT_SCRIPT):
            script = await asyncio.to_thread(self.source.load)
            await page.inject_script(script)

        raw = await page.evaluate(AXE_RUN_SCRIPT, {"exclude": [[s] for s in exclude], "tags": self.tags})
        if not isinstance(raw, dict):
            raise ScanError(f"Unexpected axe-core result: {type(raw).__name__}")
        if raw.get("error"):
            raise ScanError(str(raw["error"]))
        return ScanResult.from_axe(raw)


async def count_manual_issues(page: PageHandle, log: EventLog) -> Dict[str, Optional[int]]:
    """Two DOM heuristics recorded next to the scan. Failures yield None, never raise."""
    checks = {
        "linksWithoutText": ('a[href]:not([aria-label]):not([title])', LINKS_WITHOUT_TEXT_SCRIPT),
        "listIssues": ("ul, ol", LIST_ISSUES_SCRIPT),
    }
    counts: Dict[str, Optional[int]] = {}
    for key, (selector, script) in checks.items():
        try:
            counts[key] = int(await page.evaluate_all(selector, script))
        except Exception as e:
            log.warning("MANUAL_CHECK_FAILED", f"Manual check {key} failed: {e}", check=key)
            counts[key] = None

    log.info("MANUAL_CHECKS", f"Links without accessible text: {counts['linksWithoutText']}, "
                              f"lists with improper structure: {counts['listIssues']}", **counts)
    return counts


async def explain_link_name(page: PageHandle, scan: ScanResult, links_without_text: Optional[int],
                            log: EventLog) -> List[Dict[str, Any]]:
    """
    axe reports ``link-name`` as inapplicable while the heuristic saw empty
    links: log a few sample links so the discrepancy can be checked by hand.
    """
    if not links_without_text or scan.find("link-name") is None:
        return []
    try:
        samples = (await page.evaluate_all("a[href]", SAMPLE_LINKS_SCRIPT))[:3]
    except Exception as e:
        log.warning("MANUAL_CHECK_FAILED", f"Could not sample links: {e}", check="link-name")
        return []
    log.debug("LINK_NAME_MISMATCH",
              f"link-name is inapplicable but {links_without_text} links without text were found",
              samples=samples)
    return samples
