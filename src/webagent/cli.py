"""
webagent Command-Line Interface

Runs a single browser task from the command line.

Usage:
    webagent "Your task description here"
    webagent "Go to example.com and extract the page title" --headless
    webagent "Find the pricing page on example.com" --max-steps 10 --debug
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

from webagent.agent import Agent
from webagent.core.config import AgentConfig, BrowserConfig, ModelConfig
from webagent.core.types import TaskProgress


def add_cli_status_messages(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Print user-friendly status lines for key events."""
    event = event_dict.get("event", "")
    level = event_dict.get("level", "info")

    if level not in ("info", "warning", "error"):
        return event_dict

    status_messages = {
        "task_received": lambda d: f"🤖 Starting task (max {d.get('max_steps', '?')} steps)",
        "browser_started": "🌐 Browser launched",
        "step_executed": lambda d: f"🔄 Step {d.get('step', '?')}: {d.get('action', '?')} - {d.get('result', '')}",
        "action_failed": lambda d: f"❌ Action failed: {d.get('error', 'Unknown error')}",
        "planning_failed": lambda d: f"⚠️  Planning failed ({d.get('reason', '?')}), waiting before retrying",
        "task_cancel_requested": "⏹️  Cancelling task",
        "error_screenshot_captured": lambda d: f"📸 Error screenshot saved to {d.get('filepath', '?')}",
    }

    if event in status_messages:
        msg = status_messages[event]
        status = msg(event_dict) if callable(msg) else msg
        print(status, flush=True)

    return event_dict


def configure_logging(log_level: str) -> None:
    """Configure structlog for console output."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            add_cli_status_messages,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="webagent",
        description="webagent - Autonomous browser agent driven by a language model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  webagent "Navigate to example.com and extract the page title"
  webagent "Search Wikipedia for Python" --headless --max-steps 10
  webagent "Open the docs on example.com" --debug --step-delay 0

Environment Variables:
  ANTHROPIC_API_KEY         Required: Your Anthropic API key
  WEBAGENT_MODEL            Optional: Model used for planning
  WEBAGENT_SCREENSHOTS_DIR  Optional: Where error screenshots are written
        """
    )

    parser.add_argument(
        "task",
        type=str,
        help="Natural language description of the task to execute"
    )

    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Anthropic API key (or set ANTHROPIC_API_KEY env var)"
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model to use for planning (or set WEBAGENT_MODEL env var)"
    )

    parser.add_argument(
        "--max-steps",
        type=int,
        default=20,
        help="Maximum number of plan/act cycles (default: 20)"
    )

    parser.add_argument(
        "--step-delay",
        type=int,
        default=1000,
        help="Milliseconds to pause between steps (default: 1000)"
    )

    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run browser in headless mode (no visible window)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log every step with its reasoning and result"
    )

    parser.add_argument(
        "--no-screenshot-on-error",
        action="store_true",
        help="Do not capture a screenshot when the task fails"
    )

    parser.add_argument(
        "--screenshots",
        type=str,
        default=None,
        help="Directory for error screenshots (default: ./data/screenshots)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    return parser


def build_config(args: argparse.Namespace, api_key: str) -> AgentConfig:
    """Build the agent configuration from parsed arguments."""
    model_options: dict[str, Any] = {"anthropic_api_key": api_key}
    if args.model:
        model_options["model"] = args.model

    options: dict[str, Any] = {
        "max_steps": args.max_steps,
        "step_delay": args.step_delay,
        "debug_mode": args.debug,
        "screenshot_on_error": not args.no_screenshot_on_error,
        "log_level": args.log_level,
        "browser": BrowserConfig(headless=args.headless),
        "model": ModelConfig(**model_options),
    }
    if args.screenshots:
        options["screenshots_dir"] = Path(args.screenshots)

    return AgentConfig(**options)


def print_result(agent: Agent, progress: TaskProgress) -> None:
    """Print the outcome, step log and extracted data."""
    status = agent.get_current_task()

    print()
    print("=" * 70)
    if progress.completed:
        print("✅ Task completed successfully!")
    else:
        print(f"❌ Task did not finish ({status.state.value})")
    print(f"📊 Steps: {status.step_count}/{status.max_steps}")

    history = agent.get_history()
    if history:
        print()
        print("History:")
        for entry in history:
            print(f"  {entry.step}. {entry.action.type}: {entry.result} [{entry.page_url}]")

    if progress.extracted_data:
        print()
        print("Extracted data:")
        print(json.dumps(progress.extracted_data, indent=2, ensure_ascii=False))
    print("=" * 70)


async def run_task(args: argparse.Namespace) -> bool:
    """Execute the task."""
    api_key = args.api_key or os.getenv("ANTHROPIC_API_KEY")

    if not api_key:
        print("❌ Error: No API key provided.")
        print("Either set ANTHROPIC_API_KEY environment variable or use --api-key flag")
        return False

    config = build_config(args, api_key)
    configure_logging(config.log_level)
    agent = Agent(config=config)

    print("=" * 70)
    print("🤖 webagent - Browser Agent")
    print("=" * 70)
    print(f"📋 Task: {args.task}")
    print(f"🖥️  Headless: {args.headless}")
    print(f"🔁 Max steps: {config.max_steps}")
    print(f"🧠 Model: {config.model.model}")
    print("=" * 70)
    print()

    try:
        progress = await agent.execute_task(args.task)
    except Exception as e:
        print(f"\n❌ Error occurred: {e}")
        if args.log_level == "DEBUG":
            import traceback
            traceback.print_exc()
        else:
            print("💡 Run with --log-level DEBUG to see full error details")
        return False

    print_result(agent, progress)
    return progress.completed


def main() -> int:
    """Main entry point for CLI."""
    parser = create_parser()

    if len(sys.argv) == 1:
        parser.print_help()
        return 1

    args = parser.parse_args()

    try:
        success = asyncio.run(run_task(args))
    except KeyboardInterrupt:
        print("\n\n⚠️  Task interrupted by user")
        return 1

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
