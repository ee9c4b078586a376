"""
Effects - Per-pixel clip effects as pure frame transforms.

Frames are float32 arrays (height, width, 3) in RGB order with values in
[0, 255]. Every effect takes a frame and a factor f = intensity / 100 and
returns a new frame; the input is never modified. Effect lists are
applied in order and do not commute.
"""

import math
from typing import Callable, Dict, Iterable

import cv2
import numpy as np

from packages.core.types import EffectType

EffectFn = Callable[[np.ndarray, float], np.ndarray]

LUMA = np.array([0.2989, 0.587, 0.114], dtype=np.float32)

SEPIA_MATRIX = np.array([
    [0.393, 0.769, 0.189],
    [0.349, 0.686, 0.168],
    [0.272, 0.534, 0.131],
], dtype=np.float32)

SHARPEN_KERNEL = np.array([
    [0, -1, 0],
    [-1, 5, -1],
    [0, -1, 0],
], dtype=np.float32)

MAX_BLUR_RADIUS = 20

_EFFECTS: Dict[EffectType, EffectFn] = {}


def register(effect_type: EffectType) -> Callable[[EffectFn], EffectFn]:
    """Register a transform for an effect type."""
    def decorator(fn: EffectFn) -> EffectFn:
        _EFFECTS[effect_type] = fn
        return fn
    return decorator


def _gray(frame: np.ndarray) -> np.ndarray:
    return (frame @ LUMA)[..., np.newaxis]


def _clip(frame: np.ndarray) -> np.ndarray:
    return np.clip(frame, 0.0, 255.0).astype(np.float32)


@register(EffectType.BRIGHTNESS)
def brightness(frame: np.ndarray, f: float) -> np.ndarray:
    return _clip(frame * (0.5 + f))


@register(EffectType.CONTRAST)
def contrast(frame: np.ndarray, f: float) -> np.ndarray:
    c = (259 * (f * 255 + 255)) / (255 * (259 - f * 255))
    return _clip(c * (frame - 128) + 128)


@register(EffectType.SATURATION)
def saturation(frame: np.ndarray, f: float) -> np.ndarray:
    gray = _gray(frame)
    return _clip(gray + 2 * f * (frame - gray))


@register(EffectType.GRAYSCALE)
def grayscale(frame: np.ndarray, f: float) -> np.ndarray:
    return _clip(frame * (1 - f) + _gray(frame) * f)


@register(EffectType.SEPIA)
def sepia(frame: np.ndarray, f: float) -> np.ndarray:
    toned = np.minimum(255.0, frame @ SEPIA_MATRIX.T)
    return _clip(frame * (1 - f) + toned * f)


@register(EffectType.INVERT)
def invert(frame: np.ndarray, f: float) -> np.ndarray:
    return _clip(frame * (1 - f) + (255 - frame) * f)


def hue_rotation_matrix(degrees: float) -> np.ndarray:
    """Luminance-preserving hue rotation matrix (rows are output channels)."""
    angle = math.radians(degrees)
    cos, sin = math.cos(angle), math.sin(angle)
    return np.array([
        [0.213 + cos * 0.787 - sin * 0.213, 0.715 - cos * 0.715 - sin * 0.715, 0.072 - cos * 0.072 + sin * 0.928],
        [0.213 - cos * 0.213 + sin * 0.143, 0.715 + cos * 0.285 + sin * 0.140, 0.072 - cos * 0.072 - sin * 0.283],
        [0.213 - cos * 0.213 - sin * 0.787, 0.715 - cos * 0.715 + sin * 0.715, 0.072 + cos * 0.928 + sin * 0.072],
    ], dtype=np.float32)


@register(EffectType.HUE_ROTATE)
def hue_rotate(frame: np.ndarray, f: float) -> np.ndarray:
    return _clip(frame @ hue_rotation_matrix(f * 360).T)


@register(EffectType.BLUR)
def blur(frame: np.ndarray, f: float) -> np.ndarray:
    """
    Box blur averaging only the in-bounds neighbourhood.

    Summing with a zero border and dividing by the per-pixel count of
    in-bounds samples keeps edge pixels from darkening.
    """
    radius = min(MAX_BLUR_RADIUS, int(math.floor(f * 10)))
    if radius < 1:
        return frame.copy()

    ksize = (2 * radius + 1, 2 * radius + 1)
    sums = cv2.boxFilter(
        frame, -1, ksize, normalize=False, borderType=cv2.BORDER_CONSTANT
    )
    counts = cv2.boxFilter(
        np.ones(frame.shape[:2], dtype=np.float32), -1, ksize,
        normalize=False, borderType=cv2.BORDER_CONSTANT,
    )
    return (sums / counts[..., np.newaxis]).astype(np.float32)


@register(EffectType.SHARPEN)
def sharpen(frame: np.ndarray, f: float) -> np.ndarray:
    """3x3 sharpen blended by f; the one-pixel border is left untouched."""
    result = frame.copy()
    if frame.shape[0] < 3 or frame.shape[1] < 3:
        return result
    filtered = cv2.filter2D(frame, -1, SHARPEN_KERNEL, borderType=cv2.BORDER_REPLICATE)
    blended = _clip(frame * (1 - f) + filtered * f)
    result[1:-1, 1:-1] = blended[1:-1, 1:-1]
    return result


@register(EffectType.VIGNETTE)
def vignette(frame: np.ndarray, f: float) -> np.ndarray:
    height, width = frame.shape[:2]
    cx, cy = width / 2, height / 2
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    distance = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
    max_distance = math.sqrt(cx * cx + cy * cy) or 1.0
    falloff = 1 - (distance / max_distance) * f
    return (frame * falloff[..., np.newaxis]).astype(np.float32)


def get_effect(effect_type: EffectType) -> EffectFn:
    """Look up a registered transform."""
    try:
        return _EFFECTS[EffectType(effect_type)]
    except KeyError:
        raise ValueError(f"Unknown effect type: {effect_type}")


def apply_effect(frame: np.ndarray, effect_type: EffectType, intensity: float) -> np.ndarray:
    return get_effect(effect_type)(frame, intensity / 100.0)


def apply_effects(frame: np.ndarray, effects: Iterable) -> np.ndarray:
    """
    Apply an ordered effect chain.

    Args:
        frame: float32 RGB frame
        effects: Objects with ``type`` and ``intensity`` attributes

    Returns:
        New frame; the input is left unchanged
    """
    result = frame.astype(np.float32, copy=True)
    for effect in effects:
        result = apply_effect(result, effect.type, effect.intensity)
    return result
