"""Core module - Shared types, interfaces, and configuration."""

from .types import (
    Action,
    ActionType,
    AgentState,
    ClickAction,
    CompleteAction,
    ExtractAction,
    HistoryEntry,
    NavigateAction,
    PageStructure,
    ScrollAction,
    TaskProgress,
    TaskStatus,
    TypeAction,
    WaitAction,
    parse_action,
)
from .config import AgentConfig, BrowserConfig, ModelConfig
from .errors import AgentBusyError, AgentError, InvalidActionError, PlanningError
from .interfaces import Browser, LanguageModel

__all__ = [
    "Action",
    "ActionType",
    "AgentState",
    "ClickAction",
    "CompleteAction",
    "ExtractAction",
    "HistoryEntry",
    "NavigateAction",
    "PageStructure",
    "ScrollAction",
    "TaskProgress",
    "TaskStatus",
    "TypeAction",
    "WaitAction",
    "parse_action",
    "AgentConfig",
    "BrowserConfig",
    "ModelConfig",
    "AgentBusyError",
    "AgentError",
    "InvalidActionError",
    "PlanningError",
    "Browser",
    "LanguageModel",
]
