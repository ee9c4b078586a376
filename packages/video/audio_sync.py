"""
Audio Sync - Keep media transports aligned with the timeline clock.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from packages.core.errors import AssetNotFoundError
from packages.core.protocols import AssetSource, Transport
from packages.core.utils import clamp
from packages.timeline.models import Clip, TimelineState

logger = logging.getLogger(__name__)

RESYNC_THRESHOLD = 0.3  # seconds of drift tolerated before a hard seek


def gain_at(clip: Clip, time: float, master_volume: float = 1.0) -> float:
    """
    Effective gain of a clip at a timeline time.

    volume * master, ramped linearly from 0 over the first ``fade_in``
    seconds and down to 0 over the last ``fade_out`` seconds. Both ramps
    multiply when they overlap.
    """
    gain = clip.volume * master_volume
    elapsed = time - clip.start_time
    remaining = clip.end_time - time

    if clip.fade_in > 0 and elapsed < clip.fade_in:
        gain *= max(0.0, elapsed / clip.fade_in)
    if clip.fade_out > 0 and remaining < clip.fade_out:
        gain *= max(0.0, remaining / clip.fade_out)

    return clamp(gain, 0.0, 1.0)


class AudioSyncController:
    """
    Maps the current time to transport positions and gains.

    Transports are decided per transport rather than per clip, since the
    two halves of a split clip share one asset: a transport is paused only
    when no clip using it is active.
    """

    def __init__(
        self,
        assets: Optional[AssetSource] = None,
        master_volume: float = 1.0,
        threshold: float = RESYNC_THRESHOLD,
    ):
        self.assets = assets
        self.master_volume = master_volume
        self.threshold = threshold

    def _audible_clips(self, state: TimelineState) -> Iterator[Tuple[Clip, bool, Transport]]:
        """Yield (clip, track_muted, transport) for every clip with a transport."""
        if self.assets is None:
            return
        for track in state.tracks:
            for clip in track.clips:
                if not clip.type.is_audible or clip.asset_id is None:
                    continue
                try:
                    transport = self.assets.get_transport(clip.asset_id)
                except AssetNotFoundError:
                    continue
                if transport is not None:
                    yield clip, track.muted, transport

    def update(
        self,
        state: TimelineState,
        time: float,
        playing: bool = True,
        force_seek: bool = False,
    ) -> Dict[int, float]:
        """
        Re-evaluate every audible clip at ``time``.

        Args:
            state: Timeline model (read only)
            time: Timeline time in seconds
            playing: Whether active transports should be running
            force_seek: Seek every active transport regardless of drift

        Returns:
            Gain per active, unmuted clip id
        """
        active: Dict[int, Tuple[Transport, Clip]] = {}
        idle: Dict[int, Transport] = {}

        for clip, muted, transport in self._audible_clips(state):
            key = id(transport)
            if clip.is_active(time) and not muted:
                active[key] = (transport, clip)
            else:
                idle[key] = transport
                if muted and clip.is_active(time):
                    transport.volume = 0.0

        for key, transport in idle.items():
            if key not in active and not transport.paused:
                transport.pause()

        gains = {}
        for transport, clip in active.values():
            target = clip.media_time(time)
            if force_seek or abs(transport.position - target) > self.threshold:
                transport.position = target
            gain = gain_at(clip, time, self.master_volume)
            transport.volume = gain
            gains[clip.id] = gain

            if playing and transport.paused:
                transport.play()
            elif not playing and not transport.paused:
                transport.pause()

        return gains

    def seek(self, state: TimelineState, time: float, playing: bool = False) -> Dict[int, float]:
        """Discontinuous jump: every clip is re-evaluated and hard-seeked."""
        return self.update(state, time, playing=playing, force_seek=True)

    def stop_all(self, state: TimelineState) -> None:
        for _, _, transport in self._audible_clips(state):
            if not transport.paused:
                transport.pause()


@dataclass
class AudioNode:
    """One transport routed into the capture graph."""
    clip_id: int
    asset_id: str
    transport: Transport
    gain: float = 0.0


class AudioCaptureGraph:
    """
    Routing of clip transports into the export capture stream.

    The export pipeline owns the graph for the duration of an export and
    must release it whether the export succeeds or fails.
    """

    def __init__(self):
        self.nodes: Dict[int, AudioNode] = {}
        self.released = False

    @classmethod
    def connect(cls, state: TimelineState, assets: Optional[AssetSource]) -> "AudioCaptureGraph":
        """Build a graph from every audible clip on an unmuted track."""
        graph = cls()
        if assets is None:
            return graph
        for track in state.tracks:
            if track.muted:
                continue
            for clip in track.clips:
                if not clip.type.is_audible or clip.asset_id is None:
                    continue
                try:
                    transport = assets.get_transport(clip.asset_id)
                except AssetNotFoundError:
                    continue
                if transport is not None:
                    graph.nodes[clip.id] = AudioNode(clip.id, clip.asset_id, transport)
        logger.debug("Audio graph connected with %d nodes", len(graph.nodes))
        return graph

    def set_gains(self, gains: Dict[int, float]) -> None:
        """Update node gains; clips missing from ``gains`` are silent."""
        for clip_id, node in self.nodes.items():
            node.gain = gains.get(clip_id, 0.0)

    def active_nodes(self) -> List[AudioNode]:
        return [node for node in self.nodes.values() if node.gain > 0 and not node.transport.paused]

    def release(self) -> None:
        """Disconnect every node."""
        self.nodes.clear()
        self.released = True
