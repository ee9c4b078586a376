"""
Compositor - Render the timeline to a single frame at a point in time.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from packages.core.errors import MediaError
from packages.core.protocols import AssetSource
from packages.core.types import ClipType
from packages.core.utils import format_timecode
from packages.timeline.models import Clip, TimelineState

from .effects import apply_effects
from .text import render_text_layer
from .transitions import apply_transition, transition_progress

logger = logging.getLogger(__name__)


@dataclass
class CompositorSettings:
    """Settings for the compositor."""
    resolution: Tuple[int, int] = (1280, 720)  # (width, height)
    background_color: Tuple[int, int, int] = (0, 0, 0)  # RGB


def fit_to_canvas(
    sample: np.ndarray,
    resolution: Tuple[int, int],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Scale a sample to fit inside the canvas, centred, keeping aspect ratio.

    Args:
        sample: RGB frame (height, width, 3)
        resolution: Canvas (width, height)

    Returns:
        (layer, alpha): float32 canvas-sized layer and its coverage mask
    """
    width, height = resolution
    src_h, src_w = sample.shape[:2]
    scale = min(width / src_w, height / src_h)
    fit_w = max(1, int(round(src_w * scale)))
    fit_h = max(1, int(round(src_h * scale)))

    if (fit_w, fit_h) != (src_w, src_h):
        sample = cv2.resize(sample, (fit_w, fit_h), interpolation=cv2.INTER_LINEAR)

    x = (width - fit_w) // 2
    y = (height - fit_h) // 2

    layer = np.zeros((height, width, 3), dtype=np.float32)
    alpha = np.zeros((height, width), dtype=np.float32)
    layer[y:y + fit_h, x:x + fit_w] = sample[..., :3]
    alpha[y:y + fit_h, x:x + fit_w] = 1.0
    return layer, alpha


class Compositor:
    """
    Deterministic frame renderer.

    The same model, time and asset samples always produce the same
    frame, so preview and export share this one code path.

    Usage:
        comp = Compositor(library, resolution=(1280, 720))
        frame = comp.render(state, 2.5)
    """

    def __init__(
        self,
        assets: Optional[AssetSource] = None,
        resolution: Tuple[int, int] = (1280, 720),
        settings: Optional[CompositorSettings] = None
    ):
        """
        Initialize the compositor.

        Args:
            assets: Asset source for visual samples
            resolution: Output resolution (width, height)
            settings: Full compositor settings
        """
        self.settings = settings or CompositorSettings(resolution=resolution)
        self.assets = assets

    @property
    def resolution(self) -> Tuple[int, int]:
        return self.settings.resolution

    def blank_frame(self) -> np.ndarray:
        """Opaque background frame, float32."""
        width, height = self.settings.resolution
        frame = np.empty((height, width, 3), dtype=np.float32)
        frame[:] = self.settings.background_color
        return frame

    def render(self, state: TimelineState, time: float) -> np.ndarray:
        """
        Composite every visible clip active at ``time``.

        Tracks are drawn back to front in array order. A clip whose
        sample cannot be produced is skipped with a warning; the rest of
        the frame still renders.

        Returns:
            RGB frame (height, width, 3), uint8
        """
        frame = self.blank_frame()

        for track in state.tracks:
            if track.hidden:
                continue
            for clip in track.clips:
                if not clip.type.is_visual or not clip.is_active(time):
                    continue
                try:
                    layer = self.render_clip(clip, time)
                except (MediaError, cv2.error, ValueError) as e:
                    logger.warning("Skipping clip %s at %s: %s", clip.id, format_timecode(time), e)
                    continue
                if layer is None:
                    continue
                rgb, alpha = layer
                alpha = alpha[..., np.newaxis]
                frame = rgb * alpha + frame * (1.0 - alpha)

        return np.clip(np.rint(frame), 0, 255).astype(np.uint8)

    def render_clip(self, clip: Clip, time: float) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """
        Render one clip's layer: sample or text, effects, opacity, transition.

        Returns:
            (rgb, alpha) canvas-sized float32 arrays, or None if the clip
            has nothing to draw
        """
        if clip.type == ClipType.TEXT:
            if clip.text_data is None:
                return None
            rgb, alpha = render_text_layer(
                clip.text_data, time - clip.start_time, self.settings.resolution
            )
        else:
            if clip.asset_id is None or self.assets is None:
                return None
            sample = self.assets.get_sample(clip.asset_id, clip.media_time(time))
            sample = apply_effects(np.asarray(sample, dtype=np.float32), clip.effects)
            rgb, alpha = fit_to_canvas(sample, self.settings.resolution)

        alpha = alpha * clip.opacity

        progress = transition_progress(clip, time)
        if progress is not None:
            alpha = apply_transition(alpha, clip.transition, progress)

        return rgb, alpha
