"""Playwright Browser - Default browser implementation around Playwright."""

from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import async_playwright, Browser, BrowserContext

from webagent.core.config import BrowserConfig

if TYPE_CHECKING:
    from playwright.async_api import Page


logger = structlog.get_logger()


class PlaywrightBrowser:
    """Chromium browser driven through Playwright's async API."""

    def __init__(self, config: BrowserConfig | None = None) -> None:
        """Initialize the browser.

        Args:
            config: Browser configuration
        """
        self.config = config or BrowserConfig()
        self._playwright = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: "Page | None" = None

    async def launch(self) -> None:
        """Start Playwright and open a page."""
        self._playwright = await async_playwright().start()
        viewport = {
            "width": self.config.viewport_width,
            "height": self.config.viewport_height,
        }

        # Use persistent context if user_data_dir is specified
        if self.config.user_data_dir:
            logger.info(
                "browser_starting_persistent",
                user_data_dir=str(self.config.user_data_dir),
                headless=self.config.headless,
            )
            self._context = await self._playwright.chromium.launch_persistent_context(
                user_data_dir=str(self.config.user_data_dir),
                headless=self.config.headless,
                viewport=viewport,
            )
            self._page = (
                self._context.pages[0]
                if self._context.pages
                else await self._context.new_page()
            )
        else:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless
            )

            context_options = {"viewport": viewport}
            if self.config.storage_state and self.config.storage_state.exists():
                logger.info(
                    "loading_storage_state",
                    storage_state=str(self.config.storage_state),
                )
                context_options["storage_state"] = str(self.config.storage_state)

            self._context = await self._browser.new_context(**context_options)
            self._page = await self._context.new_page()

        logger.info("browser_started", headless=self.config.headless)

    async def close(self) -> None:
        """Close the page's context, the browser and Playwright.

        Teardown errors are logged, not raised.
        """
        if self._context:
            try:
                await self._context.close()
            except Exception as e:
                logger.debug("context_close_error", error=str(e))

        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug("browser_close_error", error=str(e))

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug("playwright_stop_error", error=str(e))

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
        logger.info("browser_stopped")

    @property
    def page(self) -> "Page":
        """Get the current page instance."""
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    async def goto(self, url: str) -> None:
        """Navigate to a URL and wait for the load event.

        Args:
            url: URL to navigate to
        """
        # "networkidle" can time out on apps that poll continuously
        await self.page.goto(
            url, wait_until="load", timeout=self.config.navigation_timeout * 1000
        )
        logger.debug("navigated", url=url)

    async def click(self, selector: str) -> None:
        await self.page.click(selector)
        logger.debug("clicked", selector=selector)

    async def type(self, selector: str, text: str) -> None:
        await self.page.fill(selector, text)
        logger.debug("typed", selector=selector, text_length=len(text))

    async def scroll(self, selector: str | None = None, y: int | None = None) -> None:
        """Scroll an element into view, or the viewport by ``y`` pixels.

        Args:
            selector: Element to bring into view
            y: Vertical scroll amount when no selector is given
        """
        if selector:
            await self.page.locator(selector).first.scroll_into_view_if_needed()
        else:
            await self.page.mouse.wheel(0, y or 0)
        logger.debug("scrolled", selector=selector, y=y)

    async def get_content(self) -> str:
        return await self.page.content()

    async def get_current_url(self) -> str:
        return self.page.url

    async def screenshot(self, path: Path) -> None:
        """Save a full-page screenshot.

        Args:
            path: Destination PNG path
        """
        await self.page.screenshot(path=str(path), full_page=True)
        logger.info("screenshot_saved", path=str(path))
