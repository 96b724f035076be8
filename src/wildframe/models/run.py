"""Run state owned by the generation orchestrator."""

from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field

from .scene import SceneDescriptor
from .user_input import UserInput


class RunPhase(str, Enum):
    """Run lifecycle phase."""
    IDLE = "idle"
    SEQUENCE_LOADING = "sequence_loading"
    STREAMING_IMAGES = "streaming_images"
    SETTLED = "settled"
    ABORTED = "aborted"


class KeyframeStatus(str, Enum):
    """What a scene card should show for its keyframe."""
    GENERATING = "generating"
    ERROR = "error"
    READY = "ready"
    EMPTY = "empty"


class SceneState(BaseModel):
    """A scene descriptor plus its keyframe state."""

    scene: SceneDescriptor = Field(..., description="Generated scene content")
    image_url: Optional[str] = Field(None, description="data: URL of the current keyframe")
    is_generating_image: bool = Field(default=False)
    image_error: Optional[str] = Field(None, description="Last keyframe failure, if any")
    revision_id: int = Field(default=0, description="Id of the latest revision request")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def scene_number(self) -> int:
        return self.scene.scene_number

    @property
    def status(self) -> KeyframeStatus:
        # An error wins over a retained image.
        if self.is_generating_image:
            return KeyframeStatus.GENERATING
        if self.image_error:
            return KeyframeStatus.ERROR
        if self.image_url:
            return KeyframeStatus.READY
        return KeyframeStatus.EMPTY

    @property
    def can_revise(self) -> bool:
        return self.image_url is not None and not self.is_generating_image


class RunState(BaseModel):
    """Top-level state of the current run. Replaced wholesale by each new run."""

    run_id: int = Field(default=0, description="Generation id of the current run")
    phase: RunPhase = Field(default=RunPhase.IDLE)
    user_input: Optional[UserInput] = Field(None, description="Snapshot the run was started with")
    sequence: Optional[list[SceneState]] = Field(None, description="None until the sequence arrives")
    is_loading: bool = Field(default=False, description="True only while the sequence is requested")
    run_error: Optional[str] = Field(None, description="Run-level fatal error")

    class Config:
        """Pydantic config."""
        frozen = True

    def scene(self, scene_number: int) -> Optional[SceneState]:
        """Return the state of one scene, or None if it does not exist."""
        for state in self.sequence or []:
            if state.scene_number == scene_number:
                return state
        return None
