"""Browser module - Default Browser implementation."""

from .playwright_browser import PlaywrightBrowser

__all__ = ["PlaywrightBrowser"]
