"""Example: Execute a simple task with the web agent."""

import asyncio

from webagent import Agent, AgentConfig, BrowserConfig


async def main() -> None:
    """Run a simple example task."""
    config = AgentConfig(
        max_steps=5,
        debug_mode=True,
        browser=BrowserConfig(headless=False),  # Show browser for demo
    )

    agent = Agent(config=config)

    task = "Navigate to example.com and extract the page title"
    progress = await agent.execute_task(task)

    for entry in agent.get_history():
        print(f"Step {entry.step}: {entry.action.type} -> {entry.result}")

    if progress.completed:
        print(f"Task completed: {progress.extracted_data}")
    else:
        print(f"Task did not finish: {agent.get_current_task().state.value}")


if __name__ == "__main__":
    asyncio.run(main())
