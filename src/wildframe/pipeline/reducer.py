"""Pure state transitions for a generation run."""

import logging
from typing import Any

from ..errors import ErrorKind
from ..models import RunPhase, RunState, SceneState
from .events import (
    Event,
    ImageFailed,
    ImageReady,
    ImagesFinished,
    RevisionFailed,
    RevisionReady,
    RevisionStarted,
    RunStarted,
    SequenceFailed,
    SequenceReady,
)

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Generation cancelled due to API quota error."
QUOTA_STOP_PREFIX = "Image generation stopped: "


def _update_scene(state: RunState, scene_number: int, **updates: Any) -> RunState:
    sequence = [
        scene.model_copy(update=updates) if scene.scene_number == scene_number else scene
        for scene in state.sequence or []
    ]
    return state.model_copy(update={"sequence": sequence})


def _cancel_after(sequence: list[SceneState], scene_number: int) -> list[SceneState]:
    cancelled = []
    for scene in sequence:
        if scene.scene_number > scene_number and scene.is_generating_image:
            scene = scene.model_copy(
                update={"is_generating_image": False, "image_error": CANCELLED_MESSAGE}
            )
        cancelled.append(scene)
    return cancelled


def reduce(state: RunState, event: Event) -> RunState:
    """Apply one event to the run state and return the new state.

    Never mutates ``state``. Events from a superseded run, revision results
    that are no longer the latest for their scene, and events that do not
    fit the current phase are ignored by returning ``state`` itself.
    """
    if isinstance(event, RunStarted):
        if event.run_id <= state.run_id:
            return state
        return RunState(
            run_id=event.run_id,
            phase=RunPhase.SEQUENCE_LOADING,
            user_input=event.user_input,
            is_loading=True,
        )

    if event.run_id != state.run_id:
        logger.warning(f"Dropping {type(event).__name__} from superseded run {event.run_id}")
        return state

    if isinstance(event, SequenceReady):
        if state.phase != RunPhase.SEQUENCE_LOADING:
            return state
        sequence = [SceneState(scene=scene, is_generating_image=True) for scene in event.scenes]
        return state.model_copy(update={
            "sequence": sequence,
            "is_loading": False,
            "phase": RunPhase.STREAMING_IMAGES,
        })

    if isinstance(event, SequenceFailed):
        if state.phase != RunPhase.SEQUENCE_LOADING:
            return state
        return state.model_copy(update={
            "sequence": None,
            "is_loading": False,
            "run_error": event.message,
            "phase": RunPhase.ABORTED,
        })

    scene = state.scene(getattr(event, "scene_number", 0))

    if isinstance(event, ImagesFinished):
        if state.phase != RunPhase.STREAMING_IMAGES:
            return state
        return state.model_copy(update={"phase": RunPhase.SETTLED})

    if scene is None:
        logger.warning(f"Dropping {type(event).__name__} for unknown scene")
        return state

    if isinstance(event, ImageReady):
        return _update_scene(
            state, event.scene_number,
            image_url=event.image_url, is_generating_image=False, image_error=None,
        )

    if isinstance(event, ImageFailed):
        state = _update_scene(
            state, event.scene_number,
            is_generating_image=False, image_error=event.message,
        )
        if event.kind != ErrorKind.QUOTA_EXCEEDED:
            return state
        return state.model_copy(update={
            "sequence": _cancel_after(state.sequence or [], event.scene_number),
            "run_error": QUOTA_STOP_PREFIX + event.message,
            "phase": RunPhase.ABORTED,
        })

    if isinstance(event, RevisionStarted):
        return _update_scene(
            state, event.scene_number,
            is_generating_image=True, image_error=None, revision_id=event.revision_id,
        )

    if scene.revision_id != event.revision_id:
        logger.warning(
            f"Dropping stale revision {event.revision_id} for scene {event.scene_number}"
        )
        return state

    if isinstance(event, RevisionReady):
        return _update_scene(
            state, event.scene_number,
            image_url=event.image_url, is_generating_image=False, image_error=None,
        )

    if isinstance(event, RevisionFailed):
        # The previous keyframe stays in image_url behind the error.
        return _update_scene(
            state, event.scene_number,
            is_generating_image=False, image_error=event.message,
        )

    raise TypeError(f"Unknown event: {event!r}")
