"""Agent - Drives the plan, act, observe loop for a single task."""

import asyncio
from datetime import datetime
from pathlib import Path

import structlog

from webagent.core.config import AgentConfig
from webagent.core.errors import AgentBusyError
from webagent.core.interfaces import Browser, LanguageModel
from webagent.core.types import (
    AgentState,
    HistoryEntry,
    TaskProgress,
    TaskStatus,
)
from webagent.executor import ActionExecutor
from webagent.page_state import PageStateExtractor
from webagent.planner import Planner


logger = structlog.get_logger()


class Agent:
    """Autonomous browser agent.

    Each iteration executes the first proposed action, snapshots the page
    and asks the planner for the next step. The loop ends when the planner
    reports completion, the step budget runs out, the planner proposes
    nothing, the task is cancelled, or a fatal browser error occurs.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        browser: Browser | None = None,
        model: LanguageModel | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Agent configuration, fixed for the agent's lifetime
            browser: Browser to drive; defaults to a PlaywrightBrowser
            model: Language model to plan with; defaults to Anthropic
        """
        self.config = config or AgentConfig()

        if browser is None:
            from webagent.browser import PlaywrightBrowser

            browser = PlaywrightBrowser(self.config.browser)
        if model is None:
            from webagent.llm import AnthropicLanguageModel

            model = AnthropicLanguageModel(self.config.model)

        self.browser = browser
        self.model = model

        # Initialize modules
        self.extractor = PageStateExtractor()
        self.executor = ActionExecutor(
            self.browser, config=self.config, extractor=self.extractor
        )
        self.planner = Planner(self.model, config=self.config)

        # Execution state
        self._state = AgentState.IDLE
        self._current_task = ""
        self._step_count = 0
        self._history: list[HistoryEntry] = []
        self._running = False
        # Created per task so each run binds it to its own event loop
        self._cancel_event: asyncio.Event | None = None

    async def execute_task(self, task: str) -> TaskProgress:
        """Execute a natural language task.

        The browser is launched for the task and closed exactly once when
        it ends, whatever the outcome.

        Args:
            task: Natural language task description

        Returns:
            The last TaskProgress. ``completed`` is False when the step
            budget ran out, the planner stopped proposing actions, or the
            task was cancelled.

        Raises:
            AgentBusyError: If this agent is already executing a task
            Exception: Any fatal browser error, after cleanup
        """
        if self._running:
            raise AgentBusyError(
                f"Agent is already executing a task: {self._current_task!r}"
            )

        self._running = True
        self._current_task = task
        self._step_count = 0
        self._history = []
        cancel_event = asyncio.Event()
        self._cancel_event = cancel_event

        logger.info("task_received", task=task, max_steps=self.config.max_steps)

        try:
            self._state = AgentState.LAUNCHING
            await self.browser.launch()

            self._state = AgentState.PLANNING
            progress = await self.planner.plan("", task)

            while not progress.completed and self._step_count < self.config.max_steps:
                if cancel_event.is_set():
                    self._state = AgentState.CANCELLED
                    break

                if not progress.next_actions:
                    self._state = AgentState.NO_ACTIONS
                    break

                action = progress.next_actions[0]

                self._state = AgentState.EXECUTING
                result = await self.executor.execute(action, cancel_event=cancel_event)

                self._state = AgentState.OBSERVING
                page_state = await self.extractor.snapshot(self.browser)
                page_url = await self.browser.get_current_url()

                self._history.append(
                    HistoryEntry(
                        step=self._step_count,
                        action=action,
                        result=result,
                        page_url=page_url,
                    )
                )
                self._log_step(action.type, action.reasoning, result, page_url)

                if cancel_event.is_set():
                    self._step_count += 1
                    self._state = AgentState.CANCELLED
                    break

                self._state = AgentState.PLANNING
                previous = progress.progress
                progress = await self.planner.plan(
                    page_state, task, self._history, result
                )
                if progress.progress < previous:
                    logger.warning(
                        "progress_decreased",
                        step=self._step_count,
                        previous=previous,
                        current=progress.progress,
                    )

                self._step_count += 1

                if self.config.step_delay:
                    await self._pause(self.config.step_delay / 1000, cancel_event)

            if self._state not in (AgentState.CANCELLED, AgentState.NO_ACTIONS):
                if progress.completed:
                    self._state = AgentState.COMPLETED
                else:
                    self._state = AgentState.STEP_BUDGET_EXHAUSTED

            logger.info(
                "task_finished",
                task=task,
                state=self._state.value,
                completed=progress.completed,
                steps=self._step_count,
            )
            return progress

        except asyncio.CancelledError:
            self._state = AgentState.CANCELLED
            logger.info("task_cancelled", task=task, step=self._step_count)
            raise

        except Exception as e:
            self._state = AgentState.FATAL_ERROR
            logger.error("task_failed", task=task, step=self._step_count, error=str(e))
            if self.config.screenshot_on_error:
                await self._capture_error_screenshot()
            raise

        finally:
            await self._release_browser()
            self._running = False
            self._cancel_event = None

    def cancel(self) -> None:
        """Ask the running task to stop.

        A wait action or step delay in progress is interrupted; otherwise
        the loop stops before its next action. No-op when idle.
        """
        if self._cancel_event is None:
            return
        logger.info("task_cancel_requested", task=self._current_task)
        self._cancel_event.set()

    def get_history(self) -> list[HistoryEntry]:
        """Get a copy of the current or last task's step log."""
        return list(self._history)

    def get_current_task(self) -> TaskStatus:
        """Get the current task, its step count and the step budget."""
        return TaskStatus(
            task=self._current_task,
            step_count=self._step_count,
            max_steps=self.config.max_steps,
            state=self._state,
        )

    @property
    def state(self) -> AgentState:
        """Current loop state."""
        return self._state

    async def _pause(self, seconds: float, cancel_event: asyncio.Event) -> None:
        """Sleep between steps, waking early on cancellation."""
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def _log_step(self, action_type: str, reasoning: str, result: str, page_url: str) -> None:
        log = logger.info if self.config.debug_mode else logger.debug
        log(
            "step_executed",
            step=self._step_count,
            action=action_type,
            reasoning=reasoning,
            result=result,
            page_url=page_url,
        )

    async def _capture_error_screenshot(self) -> Path | None:
        screenshots_dir = Path(self.config.screenshots_dir)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filepath = screenshots_dir / f"error-{timestamp}.png"

        try:
            screenshots_dir.mkdir(parents=True, exist_ok=True)
            await self.browser.screenshot(filepath)
        except Exception as e:
            logger.warning("error_screenshot_failed", error=str(e))
            return None

        logger.info("error_screenshot_captured", filepath=str(filepath))
        return filepath

    async def _release_browser(self) -> None:
        try:
            await self.browser.close()
        except Exception as e:
            logger.warning("browser_close_failed", error=str(e))
