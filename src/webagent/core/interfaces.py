"""Collaborator interfaces consumed by the agent core."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class LanguageModel(Protocol):
    """Single-shot text completion.

    Implementations may fail (network, quota) or return malformed text;
    the planner treats both as recoverable.
    """

    async def generate(self, prompt: str) -> str:
        """Return the model's completion for a prompt."""
        ...


@runtime_checkable
class Browser(Protocol):
    """Browser capability driven by the agent.

    All operations may raise; the action executor converts those errors
    into result strings, everything else is fatal to the task.
    """

    async def launch(self) -> None:
        """Acquire the browser."""
        ...

    async def close(self) -> None:
        """Release the browser."""
        ...

    async def goto(self, url: str) -> None:
        """Navigate to a URL."""
        ...

    async def click(self, selector: str) -> None:
        """Click the element matching a selector."""
        ...

    async def type(self, selector: str, text: str) -> None:
        """Type text into the element matching a selector."""
        ...

    async def scroll(self, selector: str | None = None, y: int | None = None) -> None:
        """Scroll an element into view, or the viewport by ``y`` pixels."""
        ...

    async def get_content(self) -> str:
        """Return the current document HTML."""
        ...

    async def get_current_url(self) -> str:
        """Return the current page URL."""
        ...

    async def screenshot(self, path: Path) -> None:
        """Save a screenshot of the current page to ``path``."""
        ...
