"""Anthropic Language Model - Default LanguageModel backed by Claude."""

import anthropic
import structlog

from webagent.core.config import ModelConfig


logger = structlog.get_logger()


class AnthropicLanguageModel:
    """Single-shot text completion through the Anthropic Messages API."""

    def __init__(self, config: ModelConfig | None = None) -> None:
        """Initialize the model client.

        Args:
            config: Model configuration
        """
        self.config = config or ModelConfig()
        self.client = anthropic.AsyncAnthropic(api_key=self.config.anthropic_api_key)

    async def generate(self, prompt: str) -> str:
        """Send a prompt as a single user message.

        Args:
            prompt: Prompt text

        Returns:
            Concatenated text of the response
        """
        response = await self.client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            messages=[
                {"role": "user", "content": prompt}
            ],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.debug(
            "model_response_received",
            model=self.config.model,
            response_length=len(text),
        )
        return text
