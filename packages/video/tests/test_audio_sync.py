"""Tests for audio sync and the export audio graph."""

import pytest

from packages.core.types import ClipType
from packages.timeline.models import Clip
from packages.video.audio_sync import AudioCaptureGraph, AudioSyncController, gain_at


@pytest.fixture
def audio_state(empty_state):
    """Music (media_2) on the audio track over [0,5)."""
    empty_state.tracks[2].clips.append(
        Clip(id=7, type=ClipType.AUDIO, asset_id="media_2", start_time=0, duration=5)
    )
    return empty_state


@pytest.fixture
def sync(library):
    return AudioSyncController(library)


@pytest.fixture
def transport(library):
    return library.get_transport("media_2")


class TestGainAt:
    """Tests for gain_at."""

    @pytest.fixture
    def clip(self):
        return Clip(id=0, type=ClipType.AUDIO, duration=4, volume=0.8, fade_in=1, fade_out=1)

    def test_fade_in(self, clip):
        assert gain_at(clip, 0.5) == pytest.approx(0.4)

    def test_full_volume_in_the_middle(self, clip):
        assert gain_at(clip, 2.0) == pytest.approx(0.8)

    def test_fade_out(self, clip):
        assert gain_at(clip, 3.5) == pytest.approx(0.4)

    def test_master_volume(self, clip):
        assert gain_at(clip, 2.0, master_volume=0.5) == pytest.approx(0.4)

    def test_overlapping_fades_multiply(self):
        clip = Clip(id=0, type=ClipType.AUDIO, duration=1, fade_in=1, fade_out=1)

        assert gain_at(clip, 0.5) == pytest.approx(0.25)


class TestAudioSyncController:
    """Tests for AudioSyncController.update."""

    def test_active_clip_plays_at_media_time(self, sync, audio_state, transport):
        gains = sync.update(audio_state, 1.0)

        assert gains == {7: 1.0}
        assert transport.paused is False
        assert transport.position == pytest.approx(1.0)

    def test_small_drift_is_tolerated(self, sync, audio_state, transport):
        transport.position = 1.1

        sync.update(audio_state, 1.0)

        assert transport.position == pytest.approx(1.1)

    def test_large_drift_is_corrected(self, sync, audio_state, transport):
        transport.position = 2.0

        sync.update(audio_state, 1.0)

        assert transport.position == pytest.approx(1.0)

    def test_force_seek(self, sync, audio_state, transport):
        transport.position = 1.1

        sync.update(audio_state, 1.0, force_seek=True)

        assert transport.position == pytest.approx(1.0)

    def test_trim_offsets_position(self, sync, audio_state, transport):
        audio_state.tracks[2].clips[0].trim_start = 3

        sync.update(audio_state, 1.0, force_seek=True)

        assert transport.position == pytest.approx(4.0)

    def test_inactive_clip_pauses(self, sync, audio_state, transport):
        sync.update(audio_state, 1.0)

        gains = sync.update(audio_state, 6.0)

        assert gains == {}
        assert transport.paused is True

    def test_muted_track_is_silent(self, sync, audio_state, transport):
        audio_state.tracks[2].muted = True

        gains = sync.update(audio_state, 1.0)

        assert gains == {}
        assert transport.paused is True
        assert transport.volume == 0.0

    def test_split_halves_share_transport(self, sync, audio_state, transport):
        """An inactive half does not pause the transport its active twin uses."""
        audio_state.tracks[2].clips = [
            Clip(id=1, type=ClipType.AUDIO, asset_id="media_2", start_time=0, duration=2),
            Clip(id=2, type=ClipType.AUDIO, asset_id="media_2", start_time=2, duration=3, trim_start=2),
        ]

        sync.update(audio_state, 1.0)
        assert transport.paused is False

        gains = sync.update(audio_state, 3.0)
        assert list(gains) == [2]
        assert transport.paused is False
        assert transport.position == pytest.approx(3.0)

    def test_not_playing_keeps_transport_paused(self, sync, audio_state, transport):
        sync.seek(audio_state, 2.0, playing=False)

        assert transport.paused is True
        assert transport.position == pytest.approx(2.0)

    def test_stop_all(self, sync, audio_state, transport):
        sync.update(audio_state, 1.0)

        sync.stop_all(audio_state)

        assert transport.paused is True

    def test_missing_asset_is_ignored(self, sync, audio_state):
        audio_state.tracks[2].clips[0].asset_id = "media_404"

        assert sync.update(audio_state, 1.0) == {}

    def test_no_assets(self, audio_state):
        assert AudioSyncController().update(audio_state, 1.0) == {}


class TestAudioCaptureGraph:
    """Tests for AudioCaptureGraph."""

    def test_connect_routes_audible_clips(self, audio_state, library):
        audio_state.tracks[0].clips.append(
            Clip(id=3, type=ClipType.VIDEO, asset_id="media_0", duration=2)
        )

        graph = AudioCaptureGraph.connect(audio_state, library)

        assert sorted(graph.nodes) == [3, 7]

    def test_muted_tracks_are_not_connected(self, audio_state, library):
        audio_state.tracks[2].muted = True

        assert AudioCaptureGraph.connect(audio_state, library).nodes == {}

    def test_images_are_not_connected(self, empty_state, library):
        empty_state.tracks[0].clips.append(
            Clip(id=0, type=ClipType.IMAGE, asset_id="media_1", duration=2)
        )

        assert AudioCaptureGraph.connect(empty_state, library).nodes == {}

    def test_gains_and_active_nodes(self, sync, audio_state, library):
        graph = AudioCaptureGraph.connect(audio_state, library)

        graph.set_gains(sync.update(audio_state, 1.0))

        assert graph.nodes[7].gain == 1.0
        assert [n.clip_id for n in graph.active_nodes()] == [7]

        graph.set_gains({})
        assert graph.active_nodes() == []

    def test_release(self, audio_state, library):
        graph = AudioCaptureGraph.connect(audio_state, library)

        graph.release()

        assert graph.nodes == {}
        assert graph.released is True
