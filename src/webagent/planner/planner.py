"""Planner - Asks the language model for the next step of a task."""

import asyncio
import json
import re
from typing import Any, Sequence

import structlog
from pydantic import ValidationError

from webagent.core.config import AgentConfig
from webagent.core.errors import PlanningError
from webagent.core.interfaces import LanguageModel
from webagent.core.types import HistoryEntry, TaskProgress


logger = structlog.get_logger()


PROGRESS_SCHEMA = """{
  "completed": boolean,
  "progress": number (0-1),
  "currentStep": "description of current step",
  "nextActions": [
    {
      "type": "action_type",
      "selector": "css_selector_if_needed",
      "text": "text_to_type_or_extract_if_needed",
      "url": "url_if_navigating",
      "reasoning": "why this action makes sense",
      "confidence": number (0-1),
      "nextStep": "what happens after this action"
    }
  ],
  "extractedData": {} // optional extracted information
}"""

_FENCE_OPEN = re.compile(r"```json\n?")
_FENCE_CLOSE = re.compile(r"```\n?")
_BLANK_LINE = re.compile(r"^\s*[\r\n]", re.MULTILINE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class Planner:
    """Turns task, history and page state into a validated TaskProgress."""

    def __init__(self, model: LanguageModel, config: AgentConfig | None = None) -> None:
        """Initialize the planner.

        Args:
            model: Language model used for planning
            config: Agent configuration
        """
        self.model = model
        self.config = config or AgentConfig()

    async def plan(
        self,
        page_state: str,
        task: str,
        history: Sequence[HistoryEntry] = (),
        last_result: str | None = None,
    ) -> TaskProgress:
        """Plan the next action.

        Never raises for model or response problems: those produce the
        fallback progress, which schedules a single wait action.

        Args:
            page_state: Rendered page state, empty before the first action
            task: Natural language task description
            history: Steps executed so far
            last_result: Outcome of the most recent action

        Returns:
            Validated TaskProgress, or the fallback progress
        """
        prompt = self.build_prompt(page_state, task, history, last_result)

        try:
            response_text = await self._generate(prompt)
            progress = self.parse_response(response_text)
        except PlanningError as e:
            logger.warning("planning_failed", reason=e.reason, error=str(e))
            return TaskProgress.fallback(f"Planning failed: {e}")

        logger.debug(
            "plan_generated",
            completed=progress.completed,
            progress=progress.progress,
            current_step=progress.current_step,
            next_action=progress.next_actions[0].type if progress.next_actions else None,
        )
        return progress

    def build_prompt(
        self,
        page_state: str,
        task: str,
        history: Sequence[HistoryEntry] = (),
        last_result: str | None = None,
    ) -> str:
        """Build the planning prompt.

        Only the most recent ``history_window`` steps are included; older
        steps are dropped.
        """
        prompt = f"""You are an intelligent web automation agent. Your task is to help complete the following objective using browser automation:

TASK: {task}

"""

        window = self.config.history_window
        recent = list(history)[-window:] if window else []
        if recent:
            prompt += "PREVIOUS ACTIONS:\n"
            for entry in recent:
                prompt += (
                    f"Step {entry.step}: {entry.action.type} - "
                    f"{entry.action.reasoning} => {entry.result}\n"
                )
            prompt += "\n"

        if last_result:
            prompt += f"LAST ACTION RESULT: {last_result}\n\n"

        prompt += page_state

        prompt += f"""
INSTRUCTIONS:
1. Analyze the current page state and the task objective
2. Determine if the task is complete or what the next action should be
3. Choose the most appropriate action type: navigate, click, type, scroll, wait, extract, or complete
4. Be specific with selectors and reasoning
5. Consider the user's intent and be efficient

Action requirements:
- navigate requires "url"
- click requires "selector"
- type requires "selector" and "text"
- scroll takes an optional "selector"; without it the page scrolls down
- wait takes "text" as a duration in milliseconds
- extract takes "text" naming what to extract: title, links, content or headings

Respond ONLY with a valid JSON object in this exact format:
{PROGRESS_SCHEMA}

Only include the JSON response, no other text."""

        return prompt

    def parse_response(self, response_text: Any) -> TaskProgress:
        """Parse and validate a model response.

        Args:
            response_text: Raw model output

        Returns:
            Validated TaskProgress

        Raises:
            PlanningError: If the response is not a JSON object matching
                the TaskProgress schema
        """
        if not isinstance(response_text, str):
            raise PlanningError(
                "invalid_json",
                f"Expected text from the model, got {type(response_text).__name__}",
            )

        data = self._load_json_object(self._clean_response(response_text))

        try:
            return TaskProgress.model_validate(data)
        except ValidationError as e:
            raise PlanningError(
                "schema_violation",
                f"Response does not match the task progress schema: {e.error_count()} error(s), "
                f"first: {_first_error(e)}",
            ) from e

    async def _generate(self, prompt: str) -> str:
        timeout = self.config.planner_timeout
        try:
            return await asyncio.wait_for(self.model.generate(prompt), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise PlanningError(
                "model_timeout", f"Language model timed out after {timeout}s"
            ) from e
        except Exception as e:
            raise PlanningError("model_error", f"Language model call failed: {e}") from e

    def _clean_response(self, text: str) -> str:
        """Strip markdown code fences and blank lines."""
        cleaned = _FENCE_OPEN.sub("", text)
        cleaned = _FENCE_CLOSE.sub("", cleaned)
        cleaned = _BLANK_LINE.sub("", cleaned)
        return cleaned.strip()

    def _load_json_object(self, text: str) -> dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            # Try to find a JSON object surrounded by prose
            match = _JSON_OBJECT.search(text)
            if match is None:
                raise PlanningError("invalid_json", "No JSON object found in response")
            try:
                data = json.loads(match.group())
            except json.JSONDecodeError as e:
                raise PlanningError("invalid_json", f"Invalid JSON in response: {e}") from e

        if not isinstance(data, dict):
            raise PlanningError(
                "schema_violation",
                f"Expected a JSON object, got {type(data).__name__}",
            )
        return data


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"
