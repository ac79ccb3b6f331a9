"""Page state module - Bounded page digests for the planner."""

from .page_state import PageStateExtractor

__all__ = ["PageStateExtractor"]
