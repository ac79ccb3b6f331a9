"""Executor module - Turns actions into browser operations."""

from .executor import ActionExecutor

__all__ = ["ActionExecutor"]
