"""Data models for the sequence generator."""

from .scene import SceneDescriptor, VideoPrompt, SoundDesign, CameraMood
from .user_input import UserInput, ReferenceVideo
from .run import RunPhase, RunState, SceneState, KeyframeStatus
from .package import PromptPackage

__all__ = [
    "SceneDescriptor",
    "VideoPrompt",
    "SoundDesign",
    "CameraMood",
    "UserInput",
    "ReferenceVideo",
    "RunPhase",
    "RunState",
    "SceneState",
    "KeyframeStatus",
    "PromptPackage",
]
