"""Protocol definitions for FrameCut interfaces.

Protocols define interfaces for duck typing, allowing packages to
depend on behaviors rather than concrete implementations. The editing
core only talks to media and encoders through these.

Usage:
    from packages.core import AssetSource

    def render(time: float, assets: AssetSource) -> np.ndarray:
        # assets.get_sample() and get_duration() are available
        ...
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class Transport(Protocol):
    """Playback transport of an audio-capable asset.

    Mirrors a media element: a seekable position, a volume in [0, 1]
    and a play/pause switch.
    """

    position: float
    volume: float

    @property
    def paused(self) -> bool:
        """Whether the transport is currently paused."""
        ...

    def play(self) -> None:
        """Start or resume playback."""
        ...

    def pause(self) -> None:
        """Pause playback and release playback resources."""
        ...


@runtime_checkable
class AssetSource(Protocol):
    """Protocol for the media collaborator consumed by the core.

    Example:
        class MyAssets:
            def get_sample(self, asset_id, media_time): ...
            def get_duration(self, asset_id): ...
            def get_transport(self, asset_id): ...

        # MyAssets automatically satisfies AssetSource
        compositor = Compositor(assets=MyAssets())
    """

    def get_sample(self, asset_id: str, media_time: float) -> Any:
        """Get the decoded visual sample at a media time.

        Args:
            asset_id: Asset identifier
            media_time: Seconds into the asset's own timeline

        Returns:
            RGB frame array (height, width, 3), uint8

        Raises:
            AssetNotFoundError: If the asset is not registered
            SampleDecodeError: If no sample can be produced
        """
        ...

    def get_duration(self, asset_id: str) -> Optional[float]:
        """Get the asset duration in seconds, or None when unknown."""
        ...

    def get_transport(self, asset_id: str) -> Optional[Transport]:
        """Get the playback transport, or None for silent assets."""
        ...


@runtime_checkable
class FrameCapture(Protocol):
    """Shared frame sink written by the compositor and sampled by encoders."""

    def publish(self, frame: Any, time: float) -> None:
        """Replace the current frame."""
        ...

    def latest(self) -> Optional[Any]:
        """Return the most recently published frame."""
        ...


@runtime_checkable
class EncoderSink(Protocol):
    """Protocol for encoders fed by a live capture.

    Encoders sample the capture asynchronously rather than receiving
    frames directly, so exports run at real time.
    """

    def start(self, capture: FrameCapture, audio: Any, fps: float, resolution: tuple[int, int]) -> None:
        """Begin encoding from a live capture.

        Raises:
            EncoderError: If the encoder cannot be initialized
        """
        ...

    def stop(self) -> Any:
        """Finish encoding and return the encoded output.

        Raises:
            EncoderError: If encoding failed
        """
        ...

    def abort(self) -> None:
        """Stop immediately and discard all partial output."""
        ...


@runtime_checkable
class Serializable(Protocol):
    """Protocol for objects that can be serialized to/from dict.

    Implement this to enable JSON serialization of dataclasses.
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the object
        """
        ...

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Serializable":
        """Create instance from dictionary.

        Args:
            data: Dictionary with object data

        Returns:
            New instance of the class
        """
        ...
