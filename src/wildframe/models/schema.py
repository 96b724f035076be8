"""Response schema for scene sequences and the validator that enforces it.

``RESPONSE_SCHEMA`` is handed to the text model so it emits the right shape;
``SequenceValidator`` checks the decoded payload independently of that, since
the model is free to ignore the declared schema.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ..errors import MalformedResponse
from .scene import SceneDescriptor

logger = logging.getLogger(__name__)

_STRING = {"type": "STRING"}
_INTEGER = {"type": "INTEGER"}

VIDEO_PROMPT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "sceneNumber": {**_INTEGER, "description": "The sequence number of this scene, matching the parent object."},
        "scenePrompt": {
            **_STRING,
            "description": (
                "A detailed prompt for VEO describing the action in this 7-second clip. "
                "Focus on movement, character interaction, and camera motion."
            ),
        },
        "characterDNA": {
            **_STRING,
            "description": (
                "A JSON string representing an object where keys are animal names "
                "(e.g., 'Cheetah') and values are comma-separated visual descriptors. "
                "Example: '{\"Cheetah\": \"lithe, with a distinctive scar over its right eye\"}'. "
                "This MUST be consistent across all scenes."
            ),
        },
        "storyContext": {**_STRING, "description": "What has happened in the story up to this point."},
        "aspectRatio": {**_STRING, "description": "The aspect ratio for the clip, which must be the user-provided value."},
        "sceneEndingSummary": {**_STRING, "description": "One sentence on how this scene ends, for a smooth transition."},
        "captionDisplay": {**_STRING, "description": "Caption instructions, e.g. 'No captions, clean video output'."},
        "culturalContext": {**_STRING, "description": "Cultural context for the scene, if any."},
        "quality": {**_STRING, "description": "Desired output quality, e.g. 'Ultra Sharp 4K Quality'."},
    },
    "required": [
        "sceneNumber", "scenePrompt", "characterDNA", "storyContext", "aspectRatio",
        "sceneEndingSummary", "captionDisplay", "culturalContext", "quality",
    ],
}

SCENE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "sceneNumber": {**_INTEGER, "description": "The sequence number of this scene."},
        "totalScenes": {**_INTEGER, "description": "The total number of scenes in the sequence."},
        "storyBeat": {
            **_STRING,
            "description": "A short, cinematic title for this moment (e.g., 'The Stalk', 'The Chase').",
        },
        "imagePrompt": {
            **_STRING,
            "description": (
                "A highly detailed, cinematic prompt for Imagen to generate a keyframe still. "
                "Describe the complete scene, characters, actions, environment, and lighting."
            ),
        },
        "videoPrompt": VIDEO_PROMPT_SCHEMA,
        "soundDesign": {
            "type": "OBJECT",
            "properties": {
                "ambientSounds": {
                    "type": "ARRAY",
                    "items": _STRING,
                    "description": "Key ambient sounds with percentages, e.g. 'Rainforest ambiance (45%)'.",
                },
                "audioMix": {**_STRING, "description": "The audio mix strategy for this scene."},
            },
            "required": ["ambientSounds", "audioMix"],
        },
        "cameraMood": {
            "type": "OBJECT",
            "properties": {
                "cameraWork": {**_STRING, "description": "A specific camera movement for this scene."},
                "targetMood": {
                    **_STRING,
                    "description": "The primary mood of this scene, aligned with the requested mood.",
                },
            },
            "required": ["cameraWork", "targetMood"],
        },
    },
    "required": [
        "sceneNumber", "totalScenes", "storyBeat", "imagePrompt",
        "videoPrompt", "soundDesign", "cameraMood",
    ],
}

RESPONSE_SCHEMA: dict[str, Any] = {"type": "ARRAY", "items": SCENE_SCHEMA}


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "scene"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class SequenceValidator:
    """Validate and normalize a decoded scene array for one run."""

    def __init__(self, scene_count: int, aspect_ratio: str) -> None:
        self.scene_count = scene_count
        self.aspect_ratio = aspect_ratio

    def validate(self, payload: Any) -> list[SceneDescriptor]:
        """Turn a decoded JSON payload into ordered scene descriptors.

        Args:
            payload: The decoded response, expected to be a list of scene objects.

        Returns:
            Scenes ordered by scene number, normalized to this run.

        Raises:
            MalformedResponse: If the payload violates the scene contract.
        """
        if not isinstance(payload, list):
            raise MalformedResponse("AI response is not a JSON array of scenes.")

        if len(payload) != self.scene_count:
            raise MalformedResponse(
                f"AI returned an invalid number of scenes. "
                f"Expected {self.scene_count}, got {len(payload)}"
            )

        scenes: list[SceneDescriptor] = []
        for index, item in enumerate(payload, start=1):
            try:
                scenes.append(SceneDescriptor.model_validate(item))
            except ValidationError as e:
                raise MalformedResponse(
                    f"Scene {index} does not match the expected schema: {_describe(e)}"
                ) from e

        numbers = sorted(scene.scene_number for scene in scenes)
        if numbers != list(range(1, self.scene_count + 1)):
            raise MalformedResponse(
                f"AI returned scene numbers {numbers}; expected 1..{self.scene_count}"
            )

        scenes.sort(key=lambda scene: scene.scene_number)
        return [self._normalize(scene) for scene in scenes]

    def _normalize(self, scene: SceneDescriptor) -> SceneDescriptor:
        video_updates: dict[str, Any] = {}
        if scene.video_prompt.aspect_ratio != self.aspect_ratio:
            logger.warning(
                f"Scene {scene.scene_number}: aspect ratio "
                f"{scene.video_prompt.aspect_ratio!r} replaced with {self.aspect_ratio!r}"
            )
            video_updates["aspect_ratio"] = self.aspect_ratio
        if scene.video_prompt.scene_number != scene.scene_number:
            video_updates["scene_number"] = scene.scene_number

        updates: dict[str, Any] = {}
        if video_updates:
            updates["video_prompt"] = scene.video_prompt.model_copy(update=video_updates)
        if scene.total_scenes != self.scene_count:
            logger.warning(
                f"Scene {scene.scene_number}: totalScenes {scene.total_scenes} "
                f"replaced with {self.scene_count}"
            )
            updates["total_scenes"] = self.scene_count

        return scene.model_copy(update=updates) if updates else scene
