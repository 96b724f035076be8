"""Scene data model."""

import json
from typing import Any

from pydantic import BaseModel, Field, field_validator


def _require_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value


class VideoPrompt(BaseModel):
    """Prompt package for the video model, one per scene."""

    scene_number: int = Field(..., alias="sceneNumber", description="Matches the parent scene")
    scene_prompt: str = Field(..., alias="scenePrompt", description="Action for the 7-second clip")
    character_dna: dict[str, str] = Field(
        ...,
        alias="characterDNA",
        description="Animal name -> stable visual descriptors, identical across scenes",
    )
    story_context: str = Field(..., alias="storyContext")
    aspect_ratio: str = Field(..., alias="aspectRatio")
    scene_ending_summary: str = Field(..., alias="sceneEndingSummary")
    caption_display: str = Field(..., alias="captionDisplay")
    cultural_context: str = Field(..., alias="culturalContext")
    quality: str = Field(...)

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True

    @field_validator("scene_prompt")
    @classmethod
    def _scene_prompt_present(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("character_dna", mode="before")
    @classmethod
    def _parse_character_dna(cls, value: Any) -> Any:
        # The model sends the mapping as a JSON-encoded string.
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"characterDNA is not valid JSON: {e}") from e
            if not isinstance(value, dict):
                raise ValueError("characterDNA must encode an object")
        return value


class SoundDesign(BaseModel):
    """Sound notes for a scene."""

    ambient_sounds: list[str] = Field(..., alias="ambientSounds")
    audio_mix: str = Field(..., alias="audioMix")

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True


class CameraMood(BaseModel):
    """Camera work and emotional target for a scene."""

    camera_work: str = Field(..., alias="cameraWork")
    target_mood: str = Field(..., alias="targetMood")

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True


class SceneDescriptor(BaseModel):
    """One generated scene of a run. Content never changes after creation."""

    scene_number: int = Field(..., alias="sceneNumber", ge=1, description="1-based position")
    total_scenes: int = Field(..., alias="totalScenes", ge=1)
    story_beat: str = Field(..., alias="storyBeat", description="Short label for the beat")
    image_prompt: str = Field(..., alias="imagePrompt", description="Keyframe still prompt")
    video_prompt: VideoPrompt = Field(..., alias="videoPrompt")
    sound_design: SoundDesign = Field(..., alias="soundDesign")
    camera_mood: CameraMood = Field(..., alias="cameraMood")

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True

    @field_validator("image_prompt")
    @classmethod
    def _image_prompt_present(cls, value: str) -> str:
        return _require_text(value)
