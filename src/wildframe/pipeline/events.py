"""Events folded into the run state by the reducer.

Every event carries the ``run_id`` of the run that produced it so results
from a superseded run can be recognised and dropped.
"""

from dataclasses import dataclass
from typing import Union

from ..errors import ErrorKind
from ..models import SceneDescriptor, UserInput


@dataclass(frozen=True)
class RunStarted:
    run_id: int
    user_input: UserInput


@dataclass(frozen=True)
class SequenceReady:
    run_id: int
    scenes: tuple[SceneDescriptor, ...]


@dataclass(frozen=True)
class SequenceFailed:
    run_id: int
    message: str


@dataclass(frozen=True)
class ImageReady:
    run_id: int
    scene_number: int
    image_url: str


@dataclass(frozen=True)
class ImageFailed:
    run_id: int
    scene_number: int
    message: str
    kind: ErrorKind = ErrorKind.TRANSIENT


@dataclass(frozen=True)
class ImagesFinished:
    run_id: int


@dataclass(frozen=True)
class RevisionStarted:
    run_id: int
    scene_number: int
    revision_id: int


@dataclass(frozen=True)
class RevisionReady:
    run_id: int
    scene_number: int
    revision_id: int
    image_url: str


@dataclass(frozen=True)
class RevisionFailed:
    run_id: int
    scene_number: int
    revision_id: int
    message: str


Event = Union[
    RunStarted,
    SequenceReady,
    SequenceFailed,
    ImageReady,
    ImageFailed,
    ImagesFinished,
    RevisionStarted,
    RevisionReady,
    RevisionFailed,
]
