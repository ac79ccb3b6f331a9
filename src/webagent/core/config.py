"""Configuration management for the web agent."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


load_dotenv()


class BrowserConfig(BaseModel):
    """Settings for the default Playwright browser."""

    model_config = ConfigDict(frozen=True)

    headless: bool = Field(default=False)
    viewport_width: int = Field(default=1280)
    viewport_height: int = Field(default=720)
    navigation_timeout: float = Field(
        default=60.0, description="Seconds to wait for a page load"
    )
    user_data_dir: Path | None = Field(
        default=None, description="Browser profile directory for persistent sessions"
    )
    storage_state: Path | None = Field(
        default=None, description="Path to storage state JSON for session persistence"
    )


class ModelConfig(BaseModel):
    """Settings for the default Anthropic language model."""

    model_config = ConfigDict(frozen=True)

    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", "")
    )
    model: str = Field(
        default_factory=lambda: os.getenv("WEBAGENT_MODEL", "claude-haiku-4-5-20251001")
    )
    max_tokens: int = Field(default=2048)


class AgentConfig(BaseModel):
    """Immutable agent configuration, captured once at construction."""

    model_config = ConfigDict(frozen=True)

    # Loop settings
    max_steps: int = Field(
        default=20, ge=1, description="Hard upper bound on loop iterations"
    )
    step_delay: int = Field(
        default=1000, ge=0, description="Milliseconds to pause between iterations"
    )
    debug_mode: bool = Field(default=False, description="Verbose per-step logging")
    screenshot_on_error: bool = Field(
        default=True, description="Capture a screenshot when a task fails fatally"
    )
    screenshots_dir: Path = Field(
        default_factory=lambda: Path(
            os.getenv("WEBAGENT_SCREENSHOTS_DIR", "./data/screenshots")
        )
    )

    # Planning settings
    history_window: int = Field(
        default=3, ge=0, description="History entries included in each prompt"
    )
    planner_timeout: float = Field(
        default=60.0, gt=0, description="Seconds to wait for the language model"
    )
    action_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for a browser action"
    )

    # Logging settings
    log_level: str = Field(default="INFO")

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)
