"""Unit tests for PlaywrightBrowser module."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from webagent.browser.playwright_browser import PlaywrightBrowser
from webagent.core.config import BrowserConfig


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright page.

    Returns:
        AsyncMock configured to simulate a Playwright page
    """
    page = AsyncMock()
    page.url = "https://example.com/"
    page.content = AsyncMock(return_value="<html></html>")
    page.locator = MagicMock()
    page.locator.return_value.first.scroll_into_view_if_needed = AsyncMock()
    return page


@pytest.fixture
def mock_playwright(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright instance whose chromium yields mock_page.

    Returns:
        AsyncMock configured to simulate a started Playwright instance
    """
    playwright = AsyncMock()

    context = AsyncMock()
    context.new_page = AsyncMock(return_value=mock_page)
    context.pages = []

    browser = AsyncMock()
    browser.new_context = AsyncMock(return_value=context)

    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.chromium.launch_persistent_context = AsyncMock(return_value=context)
    return playwright


@pytest.fixture
def patched_playwright(mock_playwright: AsyncMock):
    """Patch async_playwright() to start mock_playwright."""
    with patch(
        "webagent.browser.playwright_browser.async_playwright"
    ) as mock_async_playwright:
        mock_async_playwright.return_value.start = AsyncMock(
            return_value=mock_playwright
        )
        yield mock_async_playwright


class TestPlaywrightBrowser:
    """Test suite for PlaywrightBrowser class."""

    def test_page_before_launch_raises(self) -> None:
        """Test that using the page before launch() fails clearly."""
        browser = PlaywrightBrowser()

        with pytest.raises(RuntimeError, match="Browser not launched"):
            _ = browser.page

    @pytest.mark.asyncio
    async def test_launch_opens_page(
        self, patched_playwright: MagicMock, mock_playwright: AsyncMock, mock_page: AsyncMock
    ) -> None:
        """Test that launch() starts chromium with the configured viewport."""
        browser = PlaywrightBrowser(
            BrowserConfig(headless=True, viewport_width=800, viewport_height=600)
        )

        await browser.launch()

        mock_playwright.chromium.launch.assert_awaited_once_with(headless=True)
        chromium_browser = mock_playwright.chromium.launch.return_value
        chromium_browser.new_context.assert_awaited_once_with(
            viewport={"width": 800, "height": 600}
        )
        assert browser.page is mock_page

    @pytest.mark.asyncio
    async def test_launch_loads_storage_state(
        self, patched_playwright: MagicMock, mock_playwright: AsyncMock, tmp_path: Path
    ) -> None:
        """Test that an existing storage state file is handed to the context."""
        state_file = tmp_path / "state.json"
        state_file.write_text("{}")
        browser = PlaywrightBrowser(BrowserConfig(storage_state=state_file))

        await browser.launch()

        chromium_browser = mock_playwright.chromium.launch.return_value
        kwargs = chromium_browser.new_context.call_args.kwargs
        assert kwargs["storage_state"] == str(state_file)

    @pytest.mark.asyncio
    async def test_launch_with_user_data_dir_uses_persistent_context(
        self, patched_playwright: MagicMock, mock_playwright: AsyncMock, tmp_path: Path
    ) -> None:
        """Test that a profile directory launches a persistent context."""
        browser = PlaywrightBrowser(BrowserConfig(user_data_dir=tmp_path))

        await browser.launch()

        mock_playwright.chromium.launch_persistent_context.assert_awaited_once()
        mock_playwright.chromium.launch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_page_operations(
        self, patched_playwright: MagicMock, mock_page: AsyncMock
    ) -> None:
        """Test that browser operations map onto the Playwright page."""
        browser = PlaywrightBrowser(BrowserConfig(navigation_timeout=10))
        await browser.launch()

        await browser.goto("https://example.com")
        await browser.click("#go")
        await browser.type("#q", "python")
        content = await browser.get_content()
        url = await browser.get_current_url()

        mock_page.goto.assert_awaited_once_with(
            "https://example.com", wait_until="load", timeout=10000
        )
        mock_page.click.assert_awaited_once_with("#go")
        mock_page.fill.assert_awaited_once_with("#q", "python")
        assert content == "<html></html>"
        assert url == "https://example.com/"

    @pytest.mark.asyncio
    async def test_scroll(self, patched_playwright: MagicMock, mock_page: AsyncMock) -> None:
        """Test scrolling an element into view and scrolling the viewport."""
        browser = PlaywrightBrowser()
        await browser.launch()

        await browser.scroll(selector="#footer")
        await browser.scroll(y=500)

        mock_page.locator.assert_called_once_with("#footer")
        mock_page.locator.return_value.first.scroll_into_view_if_needed.assert_awaited_once()
        mock_page.mouse.wheel.assert_awaited_once_with(0, 500)

    @pytest.mark.asyncio
    async def test_screenshot(
        self, patched_playwright: MagicMock, mock_page: AsyncMock, tmp_path: Path
    ) -> None:
        """Test that screenshots are full-page PNGs at the given path."""
        browser = PlaywrightBrowser()
        await browser.launch()
        path = tmp_path / "error.png"

        await browser.screenshot(path)

        mock_page.screenshot.assert_awaited_once_with(path=str(path), full_page=True)

    @pytest.mark.asyncio
    async def test_close_releases_everything(
        self, patched_playwright: MagicMock, mock_playwright: AsyncMock
    ) -> None:
        """Test that close() tears down context, browser and Playwright."""
        browser = PlaywrightBrowser()
        await browser.launch()
        chromium_browser = mock_playwright.chromium.launch.return_value
        context = chromium_browser.new_context.return_value

        await browser.close()

        context.close.assert_awaited_once()
        chromium_browser.close.assert_awaited_once()
        mock_playwright.stop.assert_awaited_once()
        with pytest.raises(RuntimeError):
            _ = browser.page

    @pytest.mark.asyncio
    async def test_close_swallows_teardown_errors(
        self, patched_playwright: MagicMock, mock_playwright: AsyncMock
    ) -> None:
        """Test that a failing teardown step does not stop the others."""
        browser = PlaywrightBrowser()
        await browser.launch()
        chromium_browser = mock_playwright.chromium.launch.return_value
        chromium_browser.new_context.return_value.close.side_effect = RuntimeError("gone")

        await browser.close()

        chromium_browser.close.assert_awaited_once()
        mock_playwright.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_without_launch(self) -> None:
        """Test that close() before launch() is a no-op."""
        browser = PlaywrightBrowser()

        await browser.close()
