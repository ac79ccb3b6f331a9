"""Planner module - Language-model reasoning over page state."""

from .planner import Planner

__all__ = ["Planner"]
