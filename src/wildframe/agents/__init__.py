"""AI agents for content generation and planning."""

from .base import BaseAgent
from .sequence import SequenceAgent

__all__ = ["BaseAgent", "SequenceAgent"]
