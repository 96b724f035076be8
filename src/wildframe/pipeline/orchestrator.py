"""Generation orchestrator: drives a run from scenario to keyframes."""

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Optional

from ..agents import SequenceAgent
from ..config import config
from ..errors import ErrorKind, InvalidState, TransportFailure, WildframeError
from ..models import RunState, SceneDescriptor, UserInput
from ..services.imagen import ImageGenerator, ImageReviser
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
from .reducer import reduce

logger = logging.getLogger(__name__)

StateListener = Callable[[RunState, Event], None]


def _message(error: Exception, fallback: str) -> str:
    return str(error) or fallback


class GenerationOrchestrator:
    """Owns the run state and folds every async result through the reducer.

    Keyframes of a run are requested one scene at a time in scene order,
    with a pacing delay between requests. A quota failure stops the run and
    cancels the scenes that have not started; any other image failure stays
    with its scene. Revisions are independent of the run loop and may
    overlap it and each other.
    """

    def __init__(
        self,
        sequence_agent: Optional[SequenceAgent] = None,
        image_generator: Optional[ImageGenerator] = None,
        image_reviser: Optional[ImageReviser] = None,
        pacing_delay: Optional[float] = None,
        on_change: Optional[StateListener] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            sequence_agent: Writes the scene sequence. Created if not provided.
            image_generator: Renders keyframes. Created if not provided.
            image_reviser: Revises keyframes. Created if not provided.
            pacing_delay: Seconds between keyframe requests. Defaults to config.
            on_change: Called with the new state and the event after every change.
            sleep: Awaitable used for pacing.
        """
        self._sequence_agent = sequence_agent or SequenceAgent()
        self._image_generator = image_generator or ImageGenerator()
        self._image_reviser = image_reviser or ImageReviser()
        self._pacing_delay = config.pacing_delay if pacing_delay is None else pacing_delay
        self._on_change = on_change
        self._sleep = sleep

        self._state = RunState()
        self._revision_ids = itertools.count(1)

    @property
    def state(self) -> RunState:
        """Return the current run state."""
        return self._state

    def dispatch(self, event: Event) -> RunState:
        """Fold one event into the state and notify the listener."""
        new_state = reduce(self._state, event)
        if new_state is not self._state:
            self._state = new_state
            if self._on_change:
                self._on_change(new_state, event)
        return self._state

    async def generate(self, user_input: UserInput) -> RunState:
        """Run the whole pipeline for one input and return the final state.

        Starting a run discards the previous one. Failures never raise: they
        end up in ``run_error`` or in the scenes' ``image_error``.
        """
        run_id = self._state.run_id + 1
        self.dispatch(RunStarted(run_id=run_id, user_input=user_input))
        logger.info(f"Run {run_id}: requesting sequence")

        try:
            scenes = await self._sequence_agent.run(user_input)
        except WildframeError as e:
            logger.error(f"Run {run_id}: sequence generation failed ({type(e).__name__}): {e}")
            self.dispatch(SequenceFailed(run_id=run_id, message=e.message))
            return self._state
        except Exception as e:
            logger.exception(f"Run {run_id}: unexpected error generating sequence")
            self.dispatch(SequenceFailed(
                run_id=run_id,
                message=_message(e, "Failed to generate sequence. Please try again."),
            ))
            return self._state

        self.dispatch(SequenceReady(run_id=run_id, scenes=tuple(scenes)))
        await self._generate_images(run_id, scenes, user_input.aspect_ratio)
        return self._state

    async def _generate_images(
        self, run_id: int, scenes: list[SceneDescriptor], aspect_ratio: str
    ) -> None:
        for index, scene in enumerate(scenes):
            if self._state.run_id != run_id:
                logger.warning(f"Run {run_id} superseded; not starting scene {scene.scene_number}")
                return

            number = scene.scene_number
            logger.info(f"Run {run_id}: keyframe {number}/{len(scenes)}")
            try:
                image_url = await self._image_generator.generate(scene.image_prompt, aspect_ratio)
            except TransportFailure as e:
                logger.error(f"Failed to generate image for scene {number}: {e}")
                self.dispatch(ImageFailed(
                    run_id=run_id, scene_number=number, message=e.message, kind=e.kind,
                ))
                if e.kind == ErrorKind.QUOTA_EXCEEDED:
                    logger.warning(
                        f"Run {run_id}: quota exhausted, cancelling scenes after {number}"
                    )
                    return
            except Exception as e:
                logger.exception(f"Failed to generate image for scene {number}")
                self.dispatch(ImageFailed(
                    run_id=run_id,
                    scene_number=number,
                    message=_message(e, "Failed to generate image."),
                ))
            else:
                self.dispatch(ImageReady(run_id=run_id, scene_number=number, image_url=image_url))

            if index < len(scenes) - 1:
                await self._sleep(self._pacing_delay)

        self.dispatch(ImagesFinished(run_id=run_id))
        logger.info(f"Run {run_id}: settled")

    async def revise(self, scene_number: int, instruction: str) -> RunState:
        """Replace one scene's keyframe using a free-text edit instruction.

        Failures stay with the scene, whatever their kind.

        Raises:
            InvalidState: If the scene does not exist, has no keyframe yet, or
                the instruction is blank. State is left untouched.
        """
        if not instruction or not instruction.strip():
            raise InvalidState("Revision instruction must not be empty.")

        run_id = self._state.run_id
        scene = self._state.scene(scene_number)
        if scene is None or scene.image_url is None:
            raise InvalidState(f"Scene {scene_number} has no keyframe to revise.")

        revision_id = next(self._revision_ids)
        source_url = scene.image_url
        self.dispatch(RevisionStarted(
            run_id=run_id, scene_number=scene_number, revision_id=revision_id,
        ))

        try:
            image_url = await self._image_reviser.revise_data_url(source_url, instruction)
        except WildframeError as e:
            logger.error(f"Failed to revise image for scene {scene_number}: {e}")
            self.dispatch(RevisionFailed(
                run_id=run_id, scene_number=scene_number,
                revision_id=revision_id, message=e.message,
            ))
        except Exception as e:
            logger.exception(f"Failed to revise image for scene {scene_number}")
            self.dispatch(RevisionFailed(
                run_id=run_id, scene_number=scene_number,
                revision_id=revision_id, message=_message(e, "Failed to revise image."),
            ))
        else:
            self.dispatch(RevisionReady(
                run_id=run_id, scene_number=scene_number,
                revision_id=revision_id, image_url=image_url,
            ))

        return self._state
