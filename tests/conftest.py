"""Shared pytest fixtures for webagent tests."""

import json
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from webagent.core.config import AgentConfig


EXAMPLE_HTML = """<!doctype html>
<html>
<head>
    <title>Example Domain</title>
    <style>body { background: #eee; }</style>
</head>
<body>
<div>
    <h1>Example Domain</h1>
    <p>This domain is for use in illustrative examples in documents.</p>
    <p><a href="https://www.iana.org/domains/example">More information...</a></p>
</div>
<script>console.log("ignored");</script>
</body>
</html>
"""


@pytest.fixture
def temp_screenshots_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for screenshots.

    Args:
        tmp_path: pytest's built-in temporary directory fixture

    Returns:
        Path to temporary screenshots directory
    """
    screenshots_dir = tmp_path / "screenshots"
    screenshots_dir.mkdir(parents=True, exist_ok=True)
    return screenshots_dir


@pytest.fixture
def test_config(temp_screenshots_dir: Path) -> AgentConfig:
    """Create a test configuration without step delays.

    Args:
        temp_screenshots_dir: Temporary screenshots directory

    Returns:
        AgentConfig instance for testing
    """
    return AgentConfig(
        max_steps=5,
        step_delay=0,
        screenshots_dir=temp_screenshots_dir,
        planner_timeout=5.0,
        action_timeout=5.0,
    )


@pytest.fixture
def example_html() -> str:
    """HTML of a small page with a title, a heading and a link."""
    return EXAMPLE_HTML


@pytest.fixture
def mock_browser(example_html: str) -> AsyncMock:
    """Create a mock Browser.

    Navigation updates the URL reported by get_current_url().

    Returns:
        AsyncMock configured to simulate a Browser
    """
    browser = AsyncMock()
    state = {"url": "about:blank"}

    async def goto(url: str) -> None:
        state["url"] = url

    async def get_current_url() -> str:
        return state["url"]

    browser.goto = AsyncMock(side_effect=goto)
    browser.get_current_url = AsyncMock(side_effect=get_current_url)
    browser.get_content = AsyncMock(return_value=example_html)
    return browser


@pytest.fixture
def mock_model() -> AsyncMock:
    """Create a mock LanguageModel.

    Returns:
        AsyncMock whose generate() is configured per test
    """
    model = AsyncMock()
    model.generate = AsyncMock()
    return model


@pytest.fixture
def make_response() -> Callable[..., str]:
    """Build a TaskProgress JSON response as the model would send it.

    Returns:
        Function taking completed, progress, current_step, actions and
        extracted_data and returning JSON text
    """

    def _make(
        completed: bool = False,
        progress: float = 0.0,
        current_step: str = "",
        actions: list[dict[str, Any]] | None = None,
        extracted_data: dict[str, Any] | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "completed": completed,
            "progress": progress,
            "currentStep": current_step,
            "nextActions": actions or [],
        }
        if extracted_data is not None:
            payload["extractedData"] = extracted_data
        return json.dumps(payload)

    return _make
