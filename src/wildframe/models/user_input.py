"""Form input for a generation run."""

import mimetypes
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .options import DEFAULT_SCENARIO

# Inline attachments above this size are rejected by the API.
MAX_REFERENCE_VIDEO_BYTES = 20 * 1024 * 1024


class ReferenceVideo(BaseModel):
    """A video clip attached to the sequence request for style guidance."""

    name: str = Field(..., description="Original file name")
    mime_type: str = Field(..., description="Video MIME type, e.g. video/mp4")
    data: bytes = Field(..., description="Raw video bytes", repr=False)

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def from_path(cls, path: Path) -> "ReferenceVideo":
        """Load a reference video from disk.

        Raises:
            ValueError: If the file is not a video or is too large to attach.
        """
        mime_type, _ = mimetypes.guess_type(path.name)
        if not mime_type or not mime_type.startswith("video/"):
            raise ValueError(f"Not a video file: {path}")

        size = path.stat().st_size
        if size > MAX_REFERENCE_VIDEO_BYTES:
            raise ValueError(
                f"Reference video is {size / 1024 / 1024:.1f} MB; "
                f"the limit is {MAX_REFERENCE_VIDEO_BYTES // 1024 // 1024} MB"
            )

        return cls(name=path.name, mime_type=mime_type, data=path.read_bytes())


class UserInput(BaseModel):
    """Everything the user selected for one run.

    Frozen so a run can hold on to the snapshot it was started with.
    """

    scenario: str = Field(default=DEFAULT_SCENARIO, description="What happens")
    duration: str = Field(default="14_seconds", description="Duration category key")
    environment: str = Field(default="African Savanna")
    time_of_day: str = Field(default="Golden Hour")
    mood: str = Field(default="Tense")
    aspect_ratio: str = Field(default="9:16", description="Aspect ratio key")
    reference_video: Optional[ReferenceVideo] = Field(None, description="Optional style reference")

    class Config:
        """Pydantic config."""
        frozen = True
