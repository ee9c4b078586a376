"""
Text - Styled, animated text layers drawn with OpenCV.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from packages.core.types import TextAnimation
from packages.core.utils import hex_to_rgb

ANIMATION_WINDOW = 0.5  # seconds
BOX_PADDING = 10
LINE_SPACING = 1.2


@dataclass
class TextAnimationState:
    """Animated drawing parameters at one instant."""
    opacity: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0
    visible_chars: Optional[int] = None  # None = all


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def animation_state(animation: TextAnimation, elapsed: float, text_length: int) -> TextAnimationState:
    """
    Map time since the clip start to drawing parameters.

    The animation runs over a fixed window and then holds its final
    values.

    Args:
        animation: Animation kind
        elapsed: Seconds since the clip start
        text_length: Character count, for typewriter reveal

    Returns:
        TextAnimationState
    """
    t = max(0.0, min(1.0, elapsed / ANIMATION_WINDOW))
    eased = ease_out_cubic(t)
    animation = TextAnimation(animation)

    if animation == TextAnimation.FADE_IN:
        return TextAnimationState(opacity=eased)
    if animation == TextAnimation.SLIDE_UP:
        return TextAnimationState(opacity=eased, offset_y=50 * (1 - eased))
    if animation == TextAnimation.SLIDE_LEFT:
        return TextAnimationState(opacity=eased, offset_x=100 * (1 - eased))
    if animation == TextAnimation.SCALE:
        return TextAnimationState(opacity=eased, scale=0.3 + 0.7 * eased)
    if animation == TextAnimation.TYPEWRITER:
        return TextAnimationState(visible_chars=int(math.floor(t * text_length)))
    return TextAnimationState()


def _font(text_data) -> Tuple[int, int]:
    """(font face, stroke thickness) for the text style."""
    face = cv2.FONT_HERSHEY_SIMPLEX
    if text_data.italic:
        face |= cv2.FONT_ITALIC
    thickness = max(1, int(round(text_data.font_size / 24)))
    if text_data.bold:
        thickness *= 2
    return face, thickness


def render_text_layer(
    text_data,
    elapsed: float,
    resolution: Tuple[int, int],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draw a text clip onto a transparent layer.

    ``x``/``y`` anchor the text block: ``y`` is its vertical centre and
    ``x`` is the left edge, centre or right edge depending on ``align``.

    Args:
        text_data: TextData of the clip
        elapsed: Seconds since the clip start
        resolution: Canvas (width, height)

    Returns:
        (layer, alpha): float32 RGB layer and float32 alpha in [0, 1]
    """
    width, height = resolution
    layer = np.zeros((height, width, 3), dtype=np.uint8)
    mask = np.zeros((height, width), dtype=np.uint8)

    state = animation_state(text_data.animation, elapsed, len(text_data.text))
    text = text_data.text
    if state.visible_chars is not None:
        text = text[:state.visible_chars]
    lines = text.split("\n")

    face, thickness = _font(text_data)
    pixel_height = max(1, int(round(text_data.font_size * state.scale)))
    font_scale = cv2.getFontScaleFromHeight(face, pixel_height, thickness)

    if not text.strip() or state.opacity <= 0:
        return layer.astype(np.float32), mask.astype(np.float32)

    sizes = [cv2.getTextSize(line, face, font_scale, thickness)[0] for line in lines]
    line_height = int(round(pixel_height * LINE_SPACING))
    block_height = line_height * len(lines)
    block_width = max(w for w, _ in sizes)

    anchor_x = text_data.x + state.offset_x
    top = int(round(text_data.y + state.offset_y - block_height / 2))

    if text_data.align == "left":
        block_left = anchor_x
    elif text_data.align == "right":
        block_left = anchor_x - block_width
    else:
        block_left = anchor_x - block_width / 2

    if text_data.bg_opacity > 0:
        x0 = int(round(block_left)) - BOX_PADDING
        y0 = top - BOX_PADDING
        x1 = int(round(block_left + block_width)) + BOX_PADDING
        y1 = top + block_height + BOX_PADDING
        box_alpha = int(round(255 * min(100.0, text_data.bg_opacity) / 100))
        cv2.rectangle(layer, (x0, y0), (x1, y1), hex_to_rgb(text_data.bg_color, (0, 0, 0)), -1)
        cv2.rectangle(mask, (x0, y0), (x1, y1), box_alpha, -1)

    color = hex_to_rgb(text_data.color)
    stroke = hex_to_rgb(text_data.stroke_color, (0, 0, 0))

    for index, (line, (line_width, _)) in enumerate(zip(lines, sizes)):
        if text_data.align == "left":
            x = block_left
        elif text_data.align == "right":
            x = block_left + block_width - line_width
        else:
            x = block_left + (block_width - line_width) / 2
        baseline = top + line_height * index + pixel_height
        org = (int(round(x)), int(round(baseline)))

        if text_data.stroke_width > 0:
            outline = thickness + 2 * int(text_data.stroke_width)
            cv2.putText(layer, line, org, face, font_scale, stroke, outline, cv2.LINE_AA)
            cv2.putText(mask, line, org, face, font_scale, 255, outline, cv2.LINE_AA)
        cv2.putText(layer, line, org, face, font_scale, color, thickness, cv2.LINE_AA)
        cv2.putText(mask, line, org, face, font_scale, 255, thickness, cv2.LINE_AA)

    alpha = mask.astype(np.float32) / 255.0 * state.opacity
    return layer.astype(np.float32), alpha
