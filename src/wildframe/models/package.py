"""Prompt package: the exportable form of a run."""

from typing import Optional
from pathlib import Path
from pydantic import BaseModel, Field
import yaml

from .run import RunState
from .scene import SceneDescriptor


class PromptPackage(BaseModel):
    """Scenes and form selections of a run, as written to ``sequence.yaml``."""

    project_name: str = Field(..., description="Project name")
    scenario: str = Field(..., description="Scenario text the run was generated from")
    duration: str = Field(..., description="Duration category key")
    environment: str = Field(...)
    time_of_day: str = Field(...)
    mood: str = Field(...)
    aspect_ratio: str = Field(...)
    reference_video: Optional[str] = Field(None, description="File name of the reference video")
    scenes: list[SceneDescriptor] = Field(default_factory=list)
    keyframes: dict[int, str] = Field(
        default_factory=dict, description="Scene number -> keyframe file name"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    @classmethod
    def from_run(cls, state: RunState, project_name: Optional[str] = None) -> "PromptPackage":
        """Build a package from a run that has produced its scenes."""
        if state.user_input is None or state.sequence is None:
            raise ValueError("Run has no sequence to export")

        user_input = state.user_input
        if project_name is None:
            # First few words of the scenario
            words = user_input.scenario.split()
            project_name = " ".join(words[:5]) + ("..." if len(words) > 5 else "")

        return cls(
            project_name=project_name,
            scenario=user_input.scenario,
            duration=user_input.duration,
            environment=user_input.environment,
            time_of_day=user_input.time_of_day,
            mood=user_input.mood,
            aspect_ratio=user_input.aspect_ratio,
            reference_video=user_input.reference_video.name if user_input.reference_video else None,
            scenes=[scene_state.scene for scene_state in state.sequence],
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "PromptPackage":
        """Load a package from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save package to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(
                self.model_dump(by_alias=True),
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )
