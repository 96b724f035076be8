"""
Tests for the run state reducer.
"""

import pytest

from wildframe.errors import ErrorKind
from wildframe.models import KeyframeStatus, RunPhase, RunState
from wildframe.pipeline import (
    CANCELLED_MESSAGE,
    ImageFailed,
    ImageReady,
    ImagesFinished,
    RevisionFailed,
    RevisionReady,
    RevisionStarted,
    RunStarted,
    SequenceFailed,
    SequenceReady,
    reduce,
)


@pytest.fixture
def streaming(make_scenes, user_input) -> RunState:
    state = reduce(RunState(), RunStarted(run_id=1, user_input=user_input))
    return reduce(state, SequenceReady(run_id=1, scenes=tuple(make_scenes(3))))


class TestRunLifecycle:
    """Tests for run-level transitions."""

    def test_run_started_clears_previous_run(self, streaming, user_input):
        state = reduce(streaming, SequenceFailed(run_id=1, message="ignored"))
        state = reduce(state, RunStarted(run_id=2, user_input=user_input))

        assert state.run_id == 2
        assert state.phase == RunPhase.SEQUENCE_LOADING
        assert state.is_loading is True
        assert state.sequence is None
        assert state.run_error is None

    def test_sequence_ready_installs_generating_scenes(self, streaming):
        assert streaming.phase == RunPhase.STREAMING_IMAGES
        assert streaming.is_loading is False
        assert [s.scene_number for s in streaming.sequence] == [1, 2, 3]
        for scene in streaming.sequence:
            assert scene.is_generating_image is True
            assert scene.image_url is None
            assert scene.image_error is None

    def test_sequence_failed_aborts(self, user_input):
        state = reduce(RunState(), RunStarted(run_id=1, user_input=user_input))
        state = reduce(state, SequenceFailed(run_id=1, message="Gemini API Error: 500"))

        assert state.phase == RunPhase.ABORTED
        assert state.run_error == "Gemini API Error: 500"
        assert state.sequence is None
        assert state.is_loading is False

    def test_images_finished_settles(self, streaming):
        state = reduce(streaming, ImagesFinished(run_id=1))

        assert state.phase == RunPhase.SETTLED

    def test_reducer_does_not_mutate_input(self, streaming):
        reduce(streaming, ImageReady(run_id=1, scene_number=1, image_url="data:image/png;base64,AA=="))

        assert streaming.scene(1).image_url is None


class TestImageEvents:
    """Tests for keyframe results."""

    def test_image_ready(self, streaming):
        state = reduce(streaming, ImageReady(run_id=1, scene_number=2, image_url="data:x/y;base64,AA=="))

        scene = state.scene(2)
        assert scene.image_url == "data:x/y;base64,AA=="
        assert scene.status == KeyframeStatus.READY
        assert state.scene(1).is_generating_image is True

    def test_transient_failure_is_scene_local(self, streaming):
        state = reduce(streaming, ImageFailed(run_id=1, scene_number=1, message="blocked"))

        assert state.scene(1).image_error == "blocked"
        assert state.scene(1).status == KeyframeStatus.ERROR
        assert state.scene(2).is_generating_image is True
        assert state.run_error is None
        assert state.phase == RunPhase.STREAMING_IMAGES

    def test_quota_failure_cancels_later_scenes(self, streaming):
        state = reduce(streaming, ImageReady(run_id=1, scene_number=1, image_url="data:x/y;base64,AA=="))
        state = reduce(state, ImageFailed(
            run_id=1, scene_number=2, message="API Quota Exceeded: 429",
            kind=ErrorKind.QUOTA_EXCEEDED,
        ))

        assert state.phase == RunPhase.ABORTED
        assert state.run_error == "Image generation stopped: API Quota Exceeded: 429"
        assert state.scene(1).status == KeyframeStatus.READY
        assert state.scene(2).image_error == "API Quota Exceeded: 429"
        assert state.scene(3).image_error == CANCELLED_MESSAGE
        assert state.scene(3).is_generating_image is False

    def test_stale_run_events_are_dropped(self, streaming, user_input):
        newer = reduce(streaming, RunStarted(run_id=2, user_input=user_input))

        state = reduce(newer, ImageReady(run_id=1, scene_number=1, image_url="data:x/y;base64,AA=="))

        assert state is newer

    def test_unknown_scene_is_ignored(self, streaming):
        state = reduce(streaming, ImageReady(run_id=1, scene_number=9, image_url="data:x/y;base64,AA=="))

        assert state is streaming


class TestRevisionEvents:
    """Tests for revision results."""

    @pytest.fixture
    def settled(self, streaming) -> RunState:
        state = streaming
        for number in (1, 2, 3):
            state = reduce(state, ImageReady(
                run_id=1, scene_number=number, image_url=f"data:image/png;base64,{number}A==",
            ))
        return reduce(state, ImagesFinished(run_id=1))

    def test_revision_round_trip(self, settled):
        state = reduce(settled, RevisionStarted(run_id=1, scene_number=2, revision_id=7))
        assert state.scene(2).status == KeyframeStatus.GENERATING

        state = reduce(state, RevisionReady(
            run_id=1, scene_number=2, revision_id=7, image_url="data:image/png;base64,NEW=",
        ))

        assert state.scene(2).image_url == "data:image/png;base64,NEW="
        assert state.scene(2).status == KeyframeStatus.READY
        assert state.scene(1) == settled.scene(1)
        assert state.scene(3) == settled.scene(3)

    def test_revision_failure_keeps_previous_image(self, settled):
        state = reduce(settled, RevisionStarted(run_id=1, scene_number=1, revision_id=1))
        state = reduce(state, RevisionFailed(run_id=1, scene_number=1, revision_id=1, message="nope"))

        scene = state.scene(1)
        assert scene.image_error == "nope"
        assert scene.image_url == "data:image/png;base64,1A=="
        assert scene.status == KeyframeStatus.ERROR
        assert scene.can_revise is True
        assert state.run_error is None

    def test_superseded_revision_is_dropped(self, settled):
        state = reduce(settled, RevisionStarted(run_id=1, scene_number=1, revision_id=1))
        state = reduce(state, RevisionStarted(run_id=1, scene_number=1, revision_id=2))

        after_stale = reduce(state, RevisionReady(
            run_id=1, scene_number=1, revision_id=1, image_url="data:image/png;base64,OLD=",
        ))

        assert after_stale is state
        assert after_stale.scene(1).is_generating_image is True
