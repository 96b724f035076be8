"""Run orchestration: events, reducer, and the async driver."""

from .events import (
    Event,
    RunStarted,
    SequenceReady,
    SequenceFailed,
    ImageReady,
    ImageFailed,
    ImagesFinished,
    RevisionStarted,
    RevisionReady,
    RevisionFailed,
)
from .reducer import reduce, CANCELLED_MESSAGE, QUOTA_STOP_PREFIX
from .orchestrator import GenerationOrchestrator

__all__ = [
    "Event",
    "RunStarted",
    "SequenceReady",
    "SequenceFailed",
    "ImageReady",
    "ImageFailed",
    "ImagesFinished",
    "RevisionStarted",
    "RevisionReady",
    "RevisionFailed",
    "reduce",
    "CANCELLED_MESSAGE",
    "QUOTA_STOP_PREFIX",
    "GenerationOrchestrator",
]
