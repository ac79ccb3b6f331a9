"""webagent - Autonomous browser agent driven by a language model."""

from webagent.agent import Agent
from webagent.core import (
    Action,
    ActionType,
    AgentConfig,
    AgentState,
    Browser,
    BrowserConfig,
    HistoryEntry,
    LanguageModel,
    ModelConfig,
    TaskProgress,
    TaskStatus,
)

__version__ = "0.1.0"

__all__ = [
    "Agent",
    "Action",
    "ActionType",
    "AgentConfig",
    "AgentState",
    "Browser",
    "BrowserConfig",
    "HistoryEntry",
    "LanguageModel",
    "ModelConfig",
    "TaskProgress",
    "TaskStatus",
]
