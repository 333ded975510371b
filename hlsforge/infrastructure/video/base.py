"""Abstract base classes for the external media tools."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class VideoDimensions:
    """Pixel size of a video stream."""

    width: int
    height: int

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width


@dataclass
class ExtractedFrame:
    """A still frame grabbed from a video."""

    path: Path
    timestamp: float
    width: int
    height: int


class MediaProbeBase(ABC):
    """Reads container and stream properties of a media file."""

    @abstractmethod
    async def get_duration(self, video_path: Path) -> float:
        """Get container duration in seconds.

        Args:
            video_path: Path to media file.

        Returns:
            Duration in seconds.

        Raises:
            ProbeException: If the probe fails or reports no duration.
        """

    @abstractmethod
    async def get_codec(self, video_path: Path) -> str:
        """Get the codec name of the first video stream (e.g. ``h264``)."""

    @abstractmethod
    async def get_dimensions(self, video_path: Path) -> VideoDimensions:
        """Get the pixel dimensions of the first video stream."""


class MediaEncoderBase(ABC):
    """Runs encodes and frame grabs.

    Implementations raise EncodeException / PosterException on failure.
    """

    @abstractmethod
    async def reencode_to_h264(self, video_path: Path, output_dir: Path) -> Path:
        """Re-encode a source to H.264.

        Args:
            video_path: Source file.
            output_dir: Directory receiving the re-encoded file.

        Returns:
            Path of the re-encoded file.
        """

    @abstractmethod
    async def encode_rendition(
        self,
        video_path: Path,
        output_dir: Path,
        resolution: str,
        scale_filter: str,
    ) -> Path:
        """Produce one HLS rendition (media playlist plus segments).

        Args:
            video_path: Source file.
            output_dir: Directory receiving ``<resolution>.m3u8`` and
                ``<resolution>_NNN.ts`` files.
            resolution: Rendition name, e.g. ``"720"``.
            scale_filter: ffmpeg scale expression for this rendition.

        Returns:
            Path of the media playlist.
        """

    @abstractmethod
    async def extract_frame(
        self,
        video_path: Path,
        timestamp: float,
        output_path: Path,
    ) -> ExtractedFrame:
        """Grab a single frame at ``timestamp`` seconds into a JPEG."""
