"""
Pytest Configuration and Fixtures

Shared fixtures for all tests. Nothing here talks to the network: the
Gemini collaborators are replaced by recording fakes.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from wildframe.models import SceneDescriptor, UserInput
from wildframe.pipeline import GenerationOrchestrator
from wildframe.services.imagen import decode_data_url, encode_data_url

CHARACTER_DNA = {
    "Cheetah": "lithe, scar over right eye, unusually dark spots",
    "Gazelle": "young male, chipped left horn, white-rimmed eyes",
}


def _scene_payload(number: int, total: int = 2, aspect_ratio: str = "9:16") -> Dict[str, Any]:
    return {
        "sceneNumber": number,
        "totalScenes": total,
        "storyBeat": f"Beat {number}",
        "imagePrompt": f"Keyframe for scene {number}",
        "videoPrompt": {
            "sceneNumber": number,
            "scenePrompt": f"Action for scene {number}",
            "characterDNA": json.dumps(CHARACTER_DNA),
            "storyContext": "The cheetah has been tracking the herd since dawn.",
            "aspectRatio": aspect_ratio,
            "sceneEndingSummary": f"Scene {number} ends in a burst of dust.",
            "captionDisplay": "No captions, clean video output",
            "culturalContext": "Focus on the wildlife of the Serengeti",
            "quality": "Ultra Sharp 4K Quality",
        },
        "soundDesign": {
            "ambientSounds": ["Savanna winds (40%)", "Distant birds (20%)"],
            "audioMix": "Wind bed under close breathing",
        },
        "cameraMood": {
            "cameraWork": "Low angle approach, hiding in the grass",
            "targetMood": "Tense",
        },
    }


@pytest.fixture
def scene_payloads() -> Callable[..., List[Dict[str, Any]]]:
    """Factory for a raw model response (characterDNA still JSON-encoded)."""
    def make(count: int = 2, aspect_ratio: str = "9:16") -> List[Dict[str, Any]]:
        return [_scene_payload(n, count, aspect_ratio) for n in range(1, count + 1)]
    return make


@pytest.fixture
def make_scenes(scene_payloads) -> Callable[[int], List[SceneDescriptor]]:
    """Factory for validated scene descriptors."""
    def make(count: int = 3) -> List[SceneDescriptor]:
        return [SceneDescriptor.model_validate(p) for p in scene_payloads(count)]
    return make


@pytest.fixture
def user_input() -> UserInput:
    return UserInput(
        scenario="A brave cheetah hunts a gazelle near a hidden hunter's trap",
        duration="21_seconds",
        environment="African Savanna",
        time_of_day="Golden Hour",
        mood="Tense",
        aspect_ratio="16:9",
    )


def scene_number_of(prompt: str) -> int:
    return int(prompt.rsplit(" ", 1)[-1])


class RecordingImageGenerator:
    """Fake image generator that records call order and overlap."""

    def __init__(self) -> None:
        self.calls: List[int] = []
        self.aspect_ratios: List[str] = []
        self.failures: Dict[int, Exception] = {}
        self.gates: Dict[int, asyncio.Event] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, prompt: str, aspect_ratio: str) -> str:
        number = scene_number_of(prompt)
        self.calls.append(number)
        self.aspect_ratios.append(aspect_ratio)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if number in self.gates:
                await self.gates[number].wait()
            if number in self.failures:
                raise self.failures[number]
            return encode_data_url(f"scene-{number}".encode(), "image/png")
        finally:
            self.in_flight -= 1


class RecordingImageReviser:
    """Fake reviser: returns the source bytes with the instruction appended."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.failure: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    async def revise_data_url(self, image_url: str, instruction: str) -> str:
        mime_type, payload = decode_data_url(image_url)
        self.calls.append((payload, mime_type, instruction))
        if self.gate is not None:
            await self.gate.wait()
        if self.failure is not None:
            raise self.failure
        return encode_data_url(payload + b"+" + instruction.encode(), mime_type)


@pytest.fixture
def image_generator() -> RecordingImageGenerator:
    return RecordingImageGenerator()


@pytest.fixture
def image_reviser() -> RecordingImageReviser:
    return RecordingImageReviser()


@pytest.fixture
def sequence_agent(make_scenes) -> MagicMock:
    agent = MagicMock()
    agent.run = AsyncMock(return_value=make_scenes(3))
    return agent


@pytest.fixture
def pacing_sleep() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def orchestrator(sequence_agent, image_generator, image_reviser, pacing_sleep) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        sequence_agent=sequence_agent,
        image_generator=image_generator,
        image_reviser=image_reviser,
        pacing_delay=1.0,
        sleep=pacing_sleep,
    )
