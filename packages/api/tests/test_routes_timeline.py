"""Tests for timeline API routes."""

import pytest


def _add_video(client, start=0.0, duration=3.0, track=0):
    return client.post("/api/timeline/clips", json={
        "track_index": track,
        "type": "video",
        "start_time": start,
        "duration": duration,
        "asset_id": "media_0",
    })


class TestTimelineEndpoint:
    """Tests for GET/PUT /api/timeline."""

    @pytest.fixture(autouse=True)
    def setup(self, client, session):
        self.client = client
        self.session = session

    def test_get_default_timeline(self):
        """A new session has the new-project track layout."""
        response = self.client.get("/api/timeline")

        assert response.status_code == 200
        data = response.json()
        assert [t["name"] for t in data["tracks"]] == ["Video 1", "Video 2", "Text", "Audio 1"]
        assert data["zoom"] == 100.0
        assert data["clipIdCounter"] == 0

    def test_put_replaces_timeline(self):
        payload = {
            "tracks": [{"id": 0, "name": "Only", "type": "video", "clips": []}],
            "zoom": 50.0,
            "clipIdCounter": 7,
        }

        response = self.client.put("/api/timeline", json=payload)

        assert response.status_code == 200
        assert response.json()["clipIdCounter"] == 7
        assert len(self.session.state.tracks) == 1

    def test_put_is_undoable(self):
        self.client.put("/api/timeline", json={"tracks": [], "zoom": 50.0, "clipIdCounter": 0})

        assert self.session.undo() is True
        assert len(self.session.state.tracks) == 4

    def test_put_invalid_timeline(self):
        """A track without an id cannot be parsed and the timeline is kept."""
        response = self.client.put("/api/timeline", json={"tracks": [{"name": "x"}]})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_timeline"
        assert len(self.session.state.tracks) == 4
        assert self.session.history.can_undo is False

    @staticmethod
    def _payload(*clips, counter=0):
        return {
            "tracks": [{"id": 0, "name": "Video 1", "type": "video", "clips": list(clips)}],
            "zoom": 100.0,
            "clipIdCounter": counter,
        }

    def test_put_overlapping_clips_rejected(self):
        payload = self._payload(
            {"id": 0, "type": "video", "startTime": 0, "duration": 5},
            {"id": 1, "type": "video", "startTime": 2, "duration": 5},
            counter=2,
        )

        response = self.client.put("/api/timeline", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "clip_overlap"
        assert len(self.session.state.tracks) == 4
        assert self.session.history.can_undo is False

    def test_put_too_short_clip_rejected(self):
        payload = self._payload({"id": 0, "type": "video", "startTime": 0, "duration": 0.01}, counter=1)

        response = self.client.put("/api/timeline", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "duration_too_short"
        assert len(self.session.state.tracks) == 4

    def test_put_duplicate_ids_rejected(self):
        """Two clips sharing an id would make id-based edits ambiguous."""
        payload = self._payload(
            {"id": 3, "type": "video", "startTime": 0, "duration": 1},
            {"id": 3, "type": "video", "startTime": 4, "duration": 1},
            counter=4,
        )

        response = self.client.put("/api/timeline", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "duplicate_clip_id"
        assert self.session.history.can_undo is False

    def test_put_wrong_track_type_rejected(self):
        payload = self._payload({"id": 0, "type": "audio", "startTime": 0, "duration": 1}, counter=1)

        response = self.client.put("/api/timeline", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "track_type_mismatch"

    def test_put_raises_stale_id_counter(self):
        """New clips never reuse an id already on the timeline."""
        payload = self._payload({"id": 2, "type": "video", "startTime": 0, "duration": 1}, counter=0)

        put = self.client.put("/api/timeline", json=payload)
        added = _add_video(self.client, start=2.0, duration=1.0)

        assert put.json()["clipIdCounter"] == 3
        assert added.json()["id"] == 3


class TestTrackEndpoints:
    """Tests for /api/timeline/tracks endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, client, session):
        self.client = client
        self.session = session

    def test_add_track(self):
        response = self.client.post("/api/timeline/tracks", json={"name": "Overlay"})

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 4
        assert data["name"] == "Overlay"
        assert data["type"] == "video"

    def test_add_audio_track(self):
        response = self.client.post("/api/timeline/tracks", json={"type": "audio"})

        assert response.status_code == 201
        assert response.json()["type"] == "audio"

    def test_mute_track(self):
        response = self.client.patch("/api/timeline/tracks/3", json={"muted": True})

        assert response.status_code == 200
        assert response.json()["muted"] is True
        assert response.json()["hidden"] is False

    def test_update_missing_track(self):
        response = self.client.patch("/api/timeline/tracks/9", json={"hidden": True})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "track_not_found"

    def test_remove_track_renumbers(self):
        response = self.client.delete("/api/timeline/tracks/0")

        assert response.status_code == 200
        assert response.json()["name"] == "Video 1"
        assert [t.id for t in self.session.state.tracks] == [0, 1, 2]

    def test_cannot_remove_last_track(self):
        self.client.put("/api/timeline", json={
            "tracks": [{"id": 0, "name": "Only", "type": "video"}],
        })

        response = self.client.delete("/api/timeline/tracks/0")

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "last_track"


class TestClipEndpoints:
    """Tests for clip create/update/delete endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, client, session):
        self.client = client
        self.session = session

    def test_add_clip(self):
        response = _add_video(self.client)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 0
        assert data["assetId"] == "media_0"
        assert data["startTime"] == 0.0
        assert data["duration"] == 3.0
        assert self.session.history.can_undo is True

    def test_overlapping_clip_is_rejected(self):
        _add_video(self.client)

        response = _add_video(self.client, start=2.0, duration=1.0)

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "clip_overlap"
        assert len(self.session.state.tracks[0].clips) == 1

    def test_clips_may_touch(self):
        _add_video(self.client)

        response = _add_video(self.client, start=3.0, duration=1.0)

        assert response.status_code == 201

    def test_wrong_track_type(self):
        response = self.client.post("/api/timeline/clips", json={
            "track_index": 0, "type": "audio", "asset_id": "media_1", "duration": 2,
        })

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "track_type_mismatch"

    def test_trim_beyond_asset(self):
        """The green video is only 4s long."""
        response = _add_video(self.client, duration=5.0)

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "trim_out_of_range"

    def test_missing_track(self):
        response = _add_video(self.client, track=9)

        assert response.status_code == 404

    def test_request_validation(self):
        response = self.client.post("/api/timeline/clips", json={
            "track_index": 0, "type": "video", "duration": 0,
        })

        assert response.status_code == 422
        assert self.session.state.clip_id_counter == 0

    def test_text_clip_gets_default_text(self):
        response = self.client.post("/api/timeline/clips", json={"track_index": 2, "type": "text"})

        assert response.status_code == 201
        assert response.json()["textData"]["text"] == "Hello World"

    def test_text_clip_with_style(self):
        response = self.client.post("/api/timeline/clips", json={
            "track_index": 2,
            "type": "text",
            "text_data": {"text": "Title", "font_size": 72, "animation": "typewriter"},
        })

        text_data = response.json()["textData"]
        assert text_data["text"] == "Title"
        assert text_data["fontSize"] == 72
        assert text_data["animation"] == "typewriter"

    def test_update_clip(self):
        _add_video(self.client)

        response = self.client.patch("/api/timeline/clips/0", json={"opacity": 0.5, "name": "Intro"})

        assert response.status_code == 200
        assert response.json()["opacity"] == 0.5
        assert response.json()["name"] == "Intro"

    def test_update_is_atomic(self):
        """One bad value rejects the whole edit."""
        _add_video(self.client)

        response = self.client.patch("/api/timeline/clips/0", json={"opacity": 0.5, "volume": 3.0})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "invalid_properties"
        assert self.session.state.tracks[0].clips[0].opacity == 1.0

    def test_update_missing_clip(self):
        response = self.client.patch("/api/timeline/clips/5", json={"opacity": 0.5})

        assert response.status_code == 404

    def test_delete_clip(self):
        _add_video(self.client)

        response = self.client.delete("/api/timeline/clips/0")

        assert response.status_code == 200
        assert response.json()["id"] == 0
        assert self.session.state.tracks[0].clips == []


class TestClipOperationEndpoints:
    """Tests for drag, resize, split and duplicate endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, client, session):
        self.client = client
        self.session = session
        _add_video(client)

    def test_drag(self):
        response = self.client.post("/api/timeline/clips/0/drag", json={"start_time": 6.23})

        assert response.status_code == 200
        assert response.json()["startTime"] == pytest.approx(6.23)

    def test_drag_snaps_to_grid(self):
        response = self.client.post("/api/timeline/clips/0/drag", json={"start_time": 6.02})

        assert response.json()["startTime"] == pytest.approx(6.0)

    def test_drag_into_overlap(self):
        _add_video(self.client, start=5.0, duration=1.0)

        response = self.client.post("/api/timeline/clips/0/drag", json={"start_time": 4.23})

        assert response.status_code == 409
        assert self.session.state.tracks[0].clips[0].start_time == 0.0

    def test_resize_right(self):
        response = self.client.post("/api/timeline/clips/0/resize", json={"side": "right", "delta": -1.0})

        assert response.status_code == 200
        assert response.json()["duration"] == pytest.approx(2.0)

    def test_resize_right_is_capped_by_asset(self):
        response = self.client.post("/api/timeline/clips/0/resize", json={"side": "right", "delta": 10.0})

        assert response.json()["duration"] == pytest.approx(4.0)

    def test_resize_bad_side(self):
        response = self.client.post("/api/timeline/clips/0/resize", json={"side": "top", "delta": 1.0})

        assert response.status_code == 422

    def test_split(self):
        response = self.client.post("/api/timeline/clips/0/split", json={"time": 1.5})

        assert response.status_code == 200
        data = response.json()
        assert data["first"]["id"] == 0
        assert data["first"]["duration"] == pytest.approx(1.5)
        assert data["second"]["id"] == 1
        assert data["second"]["startTime"] == pytest.approx(1.5)
        assert data["second"]["trimStart"] == pytest.approx(1.5)
        assert data["second"]["duration"] == pytest.approx(1.5)

    def test_split_at_playhead(self):
        self.session.seek(1.0)

        response = self.client.post("/api/timeline/clips/0/split", json={})

        assert response.json()["first"]["duration"] == pytest.approx(1.0)

    def test_split_near_edge(self):
        response = self.client.post("/api/timeline/clips/0/split", json={"time": 0.01})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "split_out_of_range"

    def test_duplicate(self):
        response = self.client.post("/api/timeline/clips/0/duplicate")

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["startTime"] == pytest.approx(3.1)
        assert data["duration"] == 3.0

    def test_duplicate_blocked(self):
        _add_video(self.client, start=3.5, duration=0.5)

        response = self.client.post("/api/timeline/clips/0/duplicate")

        assert response.status_code == 409


class TestEffectAndTransitionEndpoints:
    """Tests for effect and transition endpoints."""

    @pytest.fixture(autouse=True)
    def setup(self, client, session):
        self.client = client
        self.session = session
        _add_video(client)

    def test_add_effects_in_order(self):
        self.client.post("/api/timeline/clips/0/effects", json={"type": "grayscale"})
        response = self.client.post("/api/timeline/clips/0/effects", json={"type": "blur", "intensity": 40})

        assert response.status_code == 200
        assert response.json()["effects"] == [
            {"type": "grayscale", "intensity": 100.0},
            {"type": "blur", "intensity": 40.0},
        ]

    def test_intensity_out_of_range(self):
        response = self.client.post("/api/timeline/clips/0/effects", json={"type": "blur", "intensity": 150})

        assert response.status_code == 422

    def test_effects_on_audio_clip(self):
        self.client.post("/api/timeline/clips", json={
            "track_index": 3, "type": "audio", "asset_id": "media_1", "duration": 2,
        })

        response = self.client.post("/api/timeline/clips/1/effects", json={"type": "invert"})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "effects_unsupported"

    def test_remove_effect(self):
        self.client.post("/api/timeline/clips/0/effects", json={"type": "grayscale"})
        self.client.post("/api/timeline/clips/0/effects", json={"type": "sepia"})

        response = self.client.delete("/api/timeline/clips/0/effects/0")

        assert response.status_code == 200
        assert [e["type"] for e in response.json()["effects"]] == ["sepia"]

    def test_remove_missing_effect(self):
        response = self.client.delete("/api/timeline/clips/0/effects/3")

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "effect_not_found"

    def test_set_transition(self):
        response = self.client.post("/api/timeline/clips/0/transition", json={"type": "fade", "duration": 1.0})

        assert response.status_code == 200
        assert response.json()["transition"] == "fade"
        assert response.json()["transitionDuration"] == 1.0

    def test_clear_transition(self):
        self.client.post("/api/timeline/clips/0/transition", json={"type": "wipeLeft"})

        response = self.client.post("/api/timeline/clips/0/transition", json={"type": None})

        assert response.json()["transition"] is None

    @pytest.mark.parametrize("duration", [0, 3.5])
    def test_transition_duration_bounds(self, duration):
        response = self.client.post("/api/timeline/clips/0/transition", json={"type": "fade", "duration": duration})

        assert response.status_code == 422
