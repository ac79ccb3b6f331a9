"""LLM module - Default LanguageModel implementation."""

from .anthropic_model import AnthropicLanguageModel

__all__ = ["AnthropicLanguageModel"]
