"""
Page capabilities used by the audit pipeline, and the Playwright adapter that
provides them. The pipeline only talks to these interfaces, so tests can drive
it with an in-memory fake page.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from playwright.async_api import async_playwright


class Navigable(ABC):
    @abstractmethod
    async def goto(self, url: str, wait_until: str = "load", timeout_ms: int = 60000):
        pass

    @abstractmethod
    async def wait_for_load_state(self, state: str = "load"):
        pass

    @property
    @abstractmethod
    def url(self) -> str:
        pass

    @abstractmethod
    async def title(self) -> str:
        pass


class Interactable(ABC):
    @abstractmethod
    async def count(self, selector: str) -> int:
        pass

    @abstractmethod
    async def is_visible(self, selector: str, timeout_ms: int) -> bool:
        """Visibility of the first element matching ``selector``."""

    @abstractmethod
    async def click(self, selector: str, timeout_ms: int, first: bool = False):
        """Clicks the single element matching ``selector`` (or the first one when ``first``)."""

    @abstractmethod
    async def fill(self, selector: str, value: str, timeout_ms: int, first: bool = False):
        pass

    @abstractmethod
    async def wait(self, duration_ms: int):
        pass

    @abstractmethod
    async def inject_script(self, content: str):
        pass

    @abstractmethod
    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        pass

    @abstractmethod
    async def evaluate_all(self, selector: str, expression: str) -> Any:
        """Runs ``expression`` with the list of elements matching ``selector``."""


class Screenshottable(ABC):
    @abstractmethod
    async def screenshot(self, path: str, full_page: bool = True):
        pass


class PageHandle(Navigable, Interactable, Screenshottable):
    """Everything a scenario needs from a live page."""


class PlaywrightPage(PageHandle):
    def __init__(self, page):
        self._page = page

    async def goto(self, url: str, wait_until: str = "load", timeout_ms: int = 60000):
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def wait_for_load_state(self, state: str = "load"):
        await self._page.wait_for_load_state(state)

    @property
    def url(self) -> str:
        return self._page.url

    async def title(self) -> str:
        return await self._page.title()

    def _locator(self, selector: str, first: bool):
        locator = self._page.locator(selector)
        return locator.first if first else locator

    async def count(self, selector: str) -> int:
        return await self._page.locator(selector).count()

    async def is_visible(self, selector: str, timeout_ms: int) -> bool:
        return await self._page.locator(selector).first.is_visible(timeout=timeout_ms)

    async def click(self, selector: str, timeout_ms: int, first: bool = False):
        await self._locator(selector, first).click(timeout=timeout_ms)

    async def fill(self, selector: str, value: str, timeout_ms: int, first: bool = False):
        await self._locator(selector, first).fill(value, timeout=timeout_ms)

    async def wait(self, duration_ms: int):
        await self._page.wait_for_timeout(duration_ms)

    async def inject_script(self, content: str):
        await self._page.add_script_tag(content=content)

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return await self._page.evaluate(expression, arg)

    async def evaluate_all(self, selector: str, expression: str) -> Any:
        return await self._page.locator(selector).evaluate_all(expression)

    async def screenshot(self, path: str, full_page: bool = True):
        await self._page.screenshot(path=path, full_page=full_page)

    async def close(self):
        await self._page.close()


class BrowserSession:
    """
    One browser for the whole run. ``new_page`` hands out an isolated
    context/page pair; ``close_page`` releases both.

        async with BrowserSession("chromium", headless=True) as session:
            page, context = await session.new_page()
    """
    def __init__(self, browser_name: str = "chromium", headless: bool = True):
        self.browser_name = browser_name
        self.headless = headless
        self._playwright = None
        self._browser = None

    async def start(self):
        self._playwright = await async_playwright().start()
        browser_type = getattr(self._playwright, self.browser_name)
        self._browser = await browser_type.launch(headless=self.headless)
        return self

    async def new_page(self):
        context = await self._browser.new_context(ignore_https_errors=True, bypass_csp=True)
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise
        return PlaywrightPage(page), context

    async def close_page(self, page: Optional[PlaywrightPage], context):
        try:
            if page is not None:
                await page.close()
        finally:
            await context.close()

    async def close(self):
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def __aenter__(self):
        try:
            return await self.start()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
