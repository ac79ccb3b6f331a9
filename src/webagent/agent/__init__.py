"""Agent module - The plan, act, observe loop."""

from .agent import Agent

__all__ = ["Agent"]
