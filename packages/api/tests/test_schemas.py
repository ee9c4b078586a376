"""Tests for API schemas module."""

import pytest
from pydantic import ValidationError

from packages.api.schemas import (
    ClipCreateRequest,
    ClipUpdateRequest,
    EffectRequest,
    ErrorResponse,
    ExportRequest,
    HealthResponse,
    ProjectRequest,
    ResizeRequest,
    TextDataSchema,
    TrackCreateRequest,
    TransitionRequest,
)
from packages.core.types import ClipType, EffectType, ResizeSide, TextAnimation, TrackType
from packages.video.exporter import ExportFormat


class TestClipCreateRequest:
    """Tests for ClipCreateRequest model."""

    def test_defaults(self):
        request = ClipCreateRequest(track_index=0, type="video")

        assert request.type == ClipType.VIDEO
        assert request.start_time == 0.0
        assert request.duration == 5.0
        assert request.asset_id is None
        assert request.text_data is None

    def test_unknown_type_raises(self):
        with pytest.raises(ValidationError):
            ClipCreateRequest(track_index=0, type="hologram")

    @pytest.mark.parametrize("field, value", [
        ("track_index", -1),
        ("start_time", -0.5),
        ("duration", 0),
        ("trim_start", -1),
    ])
    def test_out_of_range(self, field, value):
        data = {"track_index": 0, "type": "video", field: value}

        with pytest.raises(ValidationError):
            ClipCreateRequest(**data)


class TestClipUpdateRequest:
    """Tests for ClipUpdateRequest model."""

    def test_only_set_fields_are_dumped(self):
        request = ClipUpdateRequest(opacity=0.5)

        assert request.model_dump(exclude_unset=True) == {"opacity": 0.5}


class TestTextDataSchema:
    """Tests for TextDataSchema model."""

    def test_defaults_match_model(self):
        text = TextDataSchema()

        assert text.text == "Hello World"
        assert text.font_size == 48
        assert text.animation == TextAnimation.NONE

    def test_font_size_bounds(self):
        with pytest.raises(ValidationError):
            TextDataSchema(font_size=4)

    def test_align_values(self):
        assert TextDataSchema(align="right").align == "right"
        with pytest.raises(ValidationError):
            TextDataSchema(align="justify")


class TestEditRequests:
    """Tests for resize, effect and transition requests."""

    def test_resize_side(self):
        assert ResizeRequest(side="left", delta=-1).side == ResizeSide.LEFT

    def test_effect_default_intensity(self):
        request = EffectRequest(type="hue-rotate")

        assert request.type == EffectType.HUE_ROTATE
        assert request.intensity == 100.0

    def test_effect_intensity_bounds(self):
        with pytest.raises(ValidationError):
            EffectRequest(type="blur", intensity=-1)

    def test_transition_clears_with_null(self):
        request = TransitionRequest()

        assert request.type is None
        assert request.duration == 0.5

    def test_transition_max_duration(self):
        assert TransitionRequest(type="fade", duration=3.0).duration == 3.0
        with pytest.raises(ValidationError):
            TransitionRequest(type="fade", duration=3.01)

    def test_track_default_type(self):
        assert TrackCreateRequest().type == TrackType.VIDEO


class TestExportRequest:
    """Tests for ExportRequest model."""

    def test_defaults(self):
        request = ExportRequest(output_name="movie.mp4")

        assert request.format == ExportFormat.MP4
        assert request.fps is None
        assert request.quality == 23
        assert request.include_audio is True

    @pytest.mark.parametrize("name", ["../movie.mp4", "dir/movie.mp4", ""])
    def test_rejects_paths(self, name):
        with pytest.raises(ValidationError):
            ExportRequest(output_name=name)

    def test_quality_bounds(self):
        with pytest.raises(ValidationError):
            ExportRequest(output_name="movie.mp4", quality=52)


class TestProjectRequest:
    """Tests for ProjectRequest model."""

    def test_accepts_plain_names(self):
        assert ProjectRequest(name="My Project-2.json").name == "My Project-2.json"

    def test_rejects_separators(self):
        with pytest.raises(ValidationError):
            ProjectRequest(name="a/b")


class TestErrorResponse:
    """Tests for ErrorResponse model."""

    def test_details_optional(self):
        response = ErrorResponse(error="clip_not_found", message="Clip 3 not found")

        assert response.details is None


class TestHealthResponse:
    """Tests for HealthResponse model."""

    def test_defaults(self):
        response = HealthResponse()

        assert response.status == "healthy"
        assert response.services == {}
