"""
Transitions - Boundary blends at a clip's start and end.

A transition is active while the render time is within
``transition_duration`` of either clip edge. Its progress runs 0 -> 1
across the start window and 1 -> 0 across the end window.
"""

from typing import Optional

import numpy as np

from packages.core.types import TransitionType


def transition_progress(clip, time: float) -> Optional[float]:
    """
    Progress of a clip's transition at a timeline time.

    Args:
        clip: Clip with transition settings
        time: Timeline time in seconds

    Returns:
        Progress in [0, 1], or None when no transition applies
    """
    if clip.transition is None or clip.transition_duration <= 0:
        return None

    window = clip.transition_duration
    elapsed = time - clip.start_time
    remaining = clip.end_time - time
    if elapsed >= window and remaining >= window:
        return None

    progress = min(elapsed / window, remaining / window)
    return max(0.0, min(1.0, progress))


def apply_transition(
    alpha: np.ndarray,
    transition_type: TransitionType,
    progress: float,
) -> np.ndarray:
    """
    Shape a layer's alpha mask for a transition.

    fade / dissolve scale the whole mask; wipes keep a
    ``progress`` fraction of the width, measured from the left edge for
    wipeLeft and from the right edge for wipeRight.

    Args:
        alpha: Layer alpha (height, width), float32 in [0, 1]
        transition_type: Kind of transition
        progress: Progress in [0, 1]

    Returns:
        New alpha mask
    """
    transition_type = TransitionType(transition_type)

    if transition_type in (TransitionType.FADE, TransitionType.DISSOLVE):
        return alpha * progress

    width = alpha.shape[1]
    visible = int(round(width * progress))
    masked = np.zeros_like(alpha)

    if transition_type == TransitionType.WIPE_LEFT:
        masked[:, :visible] = alpha[:, :visible]
    elif transition_type == TransitionType.WIPE_RIGHT:
        if visible > 0:
            masked[:, width - visible:] = alpha[:, width - visible:]
    else:
        raise ValueError(f"Unknown transition type: {transition_type}")

    return masked
