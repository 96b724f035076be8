"""Sequence agent: turns a scenario into an ordered list of scenes."""

import json
import logging

from google.genai import types

from ..config import config
from ..errors import MalformedResponse
from ..models import SceneDescriptor, UserInput
from ..models.options import DurationOption, get_duration
from ..models.schema import RESPONSE_SCHEMA, SequenceValidator
from .base import BaseAgent

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = (
    "Failed to parse the AI's response. The service may be busy. Please try again."
)


class SequenceAgent(BaseAgent[UserInput, list[SceneDescriptor]]):
    """Agent for writing a multi-scene cinematic prompt sequence.

    One request per call and no retries. Identical input may produce
    different scenes from one call to the next.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "SequenceAgent"

    def system_prompt(self, input_data: UserInput) -> str:
        """Return the director's brief for this run."""
        duration = get_duration(input_data.duration)
        structure = ", ".join(duration.structure)

        return f"""You are a world-class film director and scriptwriter specializing in cinematic wildlife documentaries. Your task is to break down a user's scenario into a series of detailed, professional-grade prompts for AI image and video generation tools (Imagen and VEO).

You MUST adhere to the following rules:
1.  **Strict JSON Output**: Your entire output must be a single, valid JSON array of scene objects, matching the provided schema perfectly. Do not include any text, explanations, or markdown formatting before or after the JSON.
2.  **Continuity is KEY**: Create a 'characterDNA' for each primary animal. This is a set of 3-5 distinct, consistent visual descriptors that MUST be referenced in EVERY prompt (image and video) where that character appears, so the same-looking animal appears across scenes. Format it as a JSON string within the 'videoPrompt' object, identical in every scene.
3.  **Core Conflict Representation**: The main characters involved in the scenario's central conflict MUST be visually represented in every scene's `imagePrompt`, framed together in the composition, even in a 'setup' scene.
4.  **Separate Prompts for Image & Video**:
    *   **imagePrompt (for Imagen)**: A still keyframe. Highly descriptive, focusing on composition, lighting, detail, and the emotional peak of the scene. Think of it as a movie poster.
    *   **videoPrompt.scenePrompt (for VEO)**: A 7-second video clip. Focus on ACTION and MOVEMENT from the beginning to the end of the 7 seconds.
5.  **Scene Structure**: Follow the provided story structure ({structure}). Each scene should logically follow the last.
6.  **Detailed Sound & Video Specs**:
    *   **soundDesign**: 'ambientSounds' (descriptive sounds with percentages, e.g. "Rainforest ambiance (45%)") and 'audioMix' (the mixing strategy).
    *   **videoPrompt**: Include 'captionDisplay', 'culturalContext', and 'quality' fields with specific, professional instructions.
7.  **VideoPrompt Object**: The 'aspectRatio' field MUST be set to "{input_data.aspect_ratio}". 'sceneEndingSummary' is crucial for linking scenes.
8.  **Total Scenes**: The 'totalScenes' field in each object must be {duration.scenes}.
9.  **Mood**: Every scene's 'cameraMood.targetMood' must be consistent with the overall mood "{input_data.mood}"."""

    async def run(self, input_data: UserInput) -> list[SceneDescriptor]:
        """Generate the scene sequence for one run.

        Args:
            input_data: The run's form selections.

        Returns:
            Scenes ordered by scene number; exactly as many as the duration implies.

        Raises:
            InvalidConfiguration: If the duration key is unknown (before any request).
            MalformedResponse: If the response is not a valid scene sequence.
            TransportFailure: If the request itself failed.
        """
        duration = get_duration(input_data.duration)

        self._logger.info(
            f"Generating {duration.scenes} scenes for: '{input_data.scenario}' "
            f"({input_data.duration}, {input_data.aspect_ratio})"
        )

        response = await self._create_message(
            contents=self._build_contents(input_data, duration),
            system_instruction=self.system_prompt(input_data),
            temperature=config.temperature,
            response_schema=RESPONSE_SCHEMA,
        )

        scenes = self._parse_response(response, duration, input_data.aspect_ratio)

        self._logger.info(f"Generated {len(scenes)} scenes")
        return scenes

    def _build_prompt(self, input_data: UserInput, duration: DurationOption) -> str:
        """Build the user prompt for sequence generation."""
        prompt_parts = [
            "Generate a cinematic sequence based on the following specifications.",
            f"- **Scenario**: {input_data.scenario}",
            f"- **Total Duration**: {input_data.duration} ({duration.description})",
            f"- **Number of Scenes**: {duration.scenes}",
            f"- **Environment**: {input_data.environment}",
            f"- **Time of Day**: {input_data.time_of_day}",
            f"- **Overall Mood**: {input_data.mood}",
            f"- **Aspect Ratio**: {input_data.aspect_ratio}",
            f"- **Scene Structure to Follow**: {' -> '.join(duration.structure)}",
            "",
        ]

        closing = (
            "Remember to maintain strict continuity for all animals using a detailed "
            "'characterDNA' formatted as a JSON string. Crucially, ensure all key characters "
            "are present in each scene's image prompt to capture the full conflict. "
            "Output ONLY the JSON array."
        )
        if input_data.reference_video:
            closing = (
                "A reference video has been provided. Analyze its content, style, and pacing "
                "to influence the generated prompts. " + closing
            )
        prompt_parts.append(closing)

        return "\n".join(prompt_parts)

    def _build_contents(self, input_data: UserInput, duration: DurationOption) -> list[types.Part]:
        parts = [types.Part.from_text(text=self._build_prompt(input_data, duration))]

        video = input_data.reference_video
        if video:
            self._logger.info(f"Attaching reference video {video.name} ({len(video.data)} bytes)")
            parts.append(types.Part.from_bytes(data=video.data, mime_type=video.mime_type))

        return parts

    def _parse_response(
        self, response: str, duration: DurationOption, aspect_ratio: str
    ) -> list[SceneDescriptor]:
        """Parse Gemini's response into validated scenes.

        Raises:
            MalformedResponse: If the text is not JSON or fails validation.
        """
        try:
            payload = json.loads(self._extract_json(response))
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse JSON: {e}")
            self._logger.debug(f"Raw response: {response}")
            raise MalformedResponse(PARSE_FAILURE_MESSAGE) from e

        validator = SequenceValidator(scene_count=duration.scenes, aspect_ratio=aspect_ratio)
        try:
            return validator.validate(payload)
        except MalformedResponse as e:
            self._logger.error(f"Sequence failed validation: {e}")
            raise

    def _extract_json(self, response: str) -> str:
        """Strip a markdown code fence if the model added one anyway."""
        text = response.strip()
        if text.startswith("```"):
            start = text.find("\n") + 1
            end = text.rfind("```")
            if end > start:
                return text[start:end].strip()
        return text
