from typing import Optional, Sequence

from .actions import run_actions, ACTION_TIMEOUT_MS
from .browser import PageHandle
from .events import EventLog
from .models import Action

NAVIGATION_TIMEOUT_MS = 60000
DYNAMIC_CONTENT_DELAY_MS = 2000
DISMISS_PROBE_TIMEOUT_MS = 500
DISMISS_CLICK_TIMEOUT_MS = 1000
DISMISS_SETTLE_MS = 500
PRE_SCAN_DELAY_MS = 1000

PASSWORD_INPUT = 'input[type="password"]'
SUBMIT_CONTROL = 'button[type="submit"], input[type="submit"]'

# Priority order: the first visible match wins
DISMISS_SELECTORS = [
    # Cookie / consent buttons
    'button[id*="accept"]',
    'button[id*="cookie"]',
    'button[class*="accept"]',
    'button[class*="cookie"]',
    'button[aria-label*="accept"]',
    'button[aria-label*="cookie"]',
    'button:has-text("Accept")',
    'button:has-text("Accept All")',
    'button:has-text("Got it")',
    'button:has-text("OK")',
    'button:has-text("Close")',
    'a[class*="close"]',
    '[role="dialog"] button',
    '.cookie-banner button',
    '#cookie-banner button',
    # Modal / overlay close buttons
    'button[aria-label="Close"]',
    'button[aria-label="Dismiss"]',
    '[data-testid="close-button"]',
    '.modal-close',
    '.overlay-close',
]


async def navigate(page: PageHandle, url: str):
    # 'load' rather than 'networkidle': pages with background polling never go idle
    await page.goto(url, wait_until="load", timeout_ms=NAVIGATION_TIMEOUT_MS)


async def navigate_with_password(page: PageHandle, url: str, password: Optional[str], log: EventLog) -> bool:
    """Navigates and, if a password wall is shown, submits ``password``. Returns True when it logged in."""
    log.info("AUTH_START", "Handling password protection...")
    await navigate(page, url)

    if await page.count(PASSWORD_INPUT) == 0:
        return False

    # Only reached when called directly; stabilize() takes this path only with a password
    if not password:
        log.warning("AUTH_SKIPPED", "Site is password protected but no password provided", url=url)
        return False

    await page.fill(PASSWORD_INPUT, password, timeout_ms=ACTION_TIMEOUT_MS, first=True)
    await page.click(SUBMIT_CONTROL, timeout_ms=ACTION_TIMEOUT_MS, first=True)
    await page.wait_for_load_state("load")
    log.success("AUTHENTICATED", "Password authentication successful", url=url)
    return True


async def dismiss_overlay(page: PageHandle, log: EventLog) -> Optional[str]:
    """
    Clicks the first visible cookie banner / modal dismiss button and returns
    the selector used, or None. At most one overlay is dismissed.
    """
    log.info("DISMISS_START", "Attempting to dismiss cookie banners and overlays...")
    for selector in DISMISS_SELECTORS:
        try:
            if not await page.is_visible(selector, timeout_ms=DISMISS_PROBE_TIMEOUT_MS):
                continue
            await page.click(selector, timeout_ms=DISMISS_CLICK_TIMEOUT_MS, first=True)
        except Exception as e:
            # Detached, covered or not clickable: try the next pattern
            log.debug("DISMISS_PROBE_FAILED", f"{selector}: {e}", selector=selector)
            continue
        log.success("OVERLAY_DISMISSED", f"Dismissed overlay/banner using: {selector}", selector=selector)
        await page.wait(DISMISS_SETTLE_MS)
        return selector

    log.info("NO_OVERLAY", "No cookie banners or overlays detected")
    return None


async def stabilize(page: PageHandle, url: str, log: EventLog,
                    password: Optional[str] = None,
                    actions: Sequence[Action] = ()):
    """Brings a page from nothing to ready-to-scan. Navigation errors propagate."""
    if password:
        await navigate_with_password(page, url, password, log)
    else:
        await navigate(page, url)

    await page.wait_for_load_state("domcontentloaded")
    await page.wait(DYNAMIC_CONTENT_DELAY_MS)
    log.info("PAGE_LOADED", "Page loaded, waiting for dynamic content...", url=page.url)

    await dismiss_overlay(page, log)
    await run_actions(page, actions, log)
    await page.wait(PRE_SCAN_DELAY_MS)
