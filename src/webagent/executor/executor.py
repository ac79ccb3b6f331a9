"""Action Executor - Maps typed actions onto browser primitives."""

import asyncio
import json
import re
from typing import Any, Awaitable, Mapping

import structlog

from webagent.core.config import AgentConfig
from webagent.core.errors import InvalidActionError
from webagent.core.interfaces import Browser
from webagent.core.types import (
    Action,
    BaseAction,
    ClickAction,
    CompleteAction,
    ExtractAction,
    NavigateAction,
    ScrollAction,
    TypeAction,
    WaitAction,
    parse_action,
)
from webagent.page_state import PageStateExtractor


logger = structlog.get_logger()


SCROLL_INCREMENT = 500
DEFAULT_WAIT_MS = 2000

_LEADING_INT = re.compile(r"\s*(\d+)")


def parse_wait_duration(text: str | None) -> int:
    """Parse a wait duration in milliseconds.

    Uses the leading integer of ``text`` ("1500", "1500ms"), falling back
    to DEFAULT_WAIT_MS when absent or unparseable.
    """
    match = _LEADING_INT.match(text or "")
    if match is None:
        return DEFAULT_WAIT_MS
    return int(match.group(1))


def _action_type(action: Any) -> Any:
    if isinstance(action, BaseAction):
        return action.type
    if isinstance(action, Mapping):
        return action.get("type")
    return None


class ActionExecutor:
    """Executes one action at a time and reports the outcome as text."""

    def __init__(
        self,
        browser: Browser,
        config: AgentConfig | None = None,
        extractor: PageStateExtractor | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            browser: Browser the actions are performed on
            config: Agent configuration
            extractor: Page state extractor used by extract actions
        """
        self.browser = browser
        self.config = config or AgentConfig()
        self.extractor = extractor or PageStateExtractor()

    async def execute(
        self,
        action: BaseAction | Mapping[str, Any],
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Execute an action.

        Failures are returned as ``"Action failed: <message>"`` instead of
        raised, so the planner can adapt on the next cycle.

        Args:
            action: Typed action, or raw action data to validate first
            cancel_event: Set by the caller to cut a wait action short

        Returns:
            One-line description of the outcome
        """
        action_type = _action_type(action)

        try:
            typed = parse_action(action)
            result = await self._dispatch(typed, cancel_event)
        except asyncio.TimeoutError:
            message = (
                f"{action_type} action timed out after {self.config.action_timeout}s"
            )
            logger.warning("action_failed", action=action_type, error=message)
            return f"Action failed: {message}"
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("action_failed", action=action_type, error=message)
            return f"Action failed: {message}"

        logger.debug("action_executed", action=typed.type, result=result)
        return result

    async def extract(self, query: str) -> dict[str, Any]:
        """Extract data from the current page by keyword.

        Only "title", "links", "text"/"content" and "headings" are
        recognized in the query; anything else yields an empty mapping.

        Args:
            query: Free-text query

        Returns:
            Mapping of the requested data
        """
        structure = await self._with_timeout(self.extractor.capture(self.browser))
        query_lower = query.lower()
        extracted: dict[str, Any] = {}

        if "title" in query_lower:
            extracted["title"] = structure.title

        if "links" in query_lower:
            extracted["links"] = [
                {"text": el.text, "href": el.href}
                for el in structure.interactive_elements
                if el.type == "link"
            ]

        if "text" in query_lower or "content" in query_lower:
            extracted["content"] = structure.main_content

        if "headings" in query_lower:
            extracted["headings"] = [h.model_dump() for h in structure.headings]

        return extracted

    async def _dispatch(
        self, action: Action, cancel_event: asyncio.Event | None = None
    ) -> str:
        match action:
            case NavigateAction(url=url):
                await self._with_timeout(self.browser.goto(url))
                return f"Navigated to {url}"

            case ClickAction(selector=selector):
                await self._with_timeout(self.browser.click(selector))
                return f"Clicked element: {selector}"

            case TypeAction(selector=selector, text=text):
                await self._with_timeout(self.browser.type(selector, text))
                return f'Typed "{text}" into {selector}'

            case ScrollAction(selector=selector) if selector:
                await self._with_timeout(self.browser.scroll(selector=selector))
                return f"Scrolled to element: {selector}"

            case ScrollAction():
                await self._with_timeout(self.browser.scroll(y=SCROLL_INCREMENT))
                return "Scrolled down page"

            case WaitAction(text=text):
                # The model picks the duration; never wait longer than an action may take
                duration = min(
                    parse_wait_duration(text), int(self.config.action_timeout * 1000)
                )
                if await self._wait(duration / 1000, cancel_event):
                    return f"Wait of {duration}ms cancelled"
                return f"Waited {duration}ms"

            case ExtractAction(text=query):
                data = await self.extract(query)
                return "Extracted data: " + json.dumps(
                    data, separators=(",", ":"), ensure_ascii=False
                )

            case CompleteAction():
                return "Task completed successfully"

            case _:
                raise InvalidActionError(
                    f"Unknown action type: {getattr(action, 'type', None)!r}"
                )

    async def _wait(self, seconds: float, cancel_event: asyncio.Event | None) -> bool:
        """Sleep for ``seconds``; return True if cancelled first."""
        if cancel_event is None:
            await asyncio.sleep(seconds)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _with_timeout(self, awaitable: Awaitable[Any]) -> Any:
        return await asyncio.wait_for(awaitable, timeout=self.config.action_timeout)
