# Video package - media, compositing, audio sync and export

from .audio_sync import AudioCaptureGraph, AudioNode, AudioSyncController, gain_at
from .compositor import Compositor, CompositorSettings, fit_to_canvas
from .effects import apply_effect, apply_effects, get_effect
from .exporter import (
    ExportFormat,
    ExportPipeline,
    ExportResult,
    ExportSettings,
    FFmpegEncoder,
    LiveCapture,
)
from .media import MediaAsset, MediaLibrary, MediaTransport
from .text import TextAnimationState, animation_state, render_text_layer
from .transitions import apply_transition, transition_progress

__all__ = [
    # Media
    "MediaLibrary",
    "MediaAsset",
    "MediaTransport",
    # Compositing
    "Compositor",
    "CompositorSettings",
    "fit_to_canvas",
    "apply_effect",
    "apply_effects",
    "get_effect",
    "apply_transition",
    "transition_progress",
    "TextAnimationState",
    "animation_state",
    "render_text_layer",
    # Audio
    "AudioSyncController",
    "AudioCaptureGraph",
    "AudioNode",
    "gain_at",
    # Export
    "ExportPipeline",
    "ExportSettings",
    "ExportFormat",
    "ExportResult",
    "FFmpegEncoder",
    "LiveCapture",
]
