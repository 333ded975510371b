"""FFmpeg implementation of HLS encoding and frame grabs."""

import asyncio
import logging
import subprocess
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from hlsforge.commons.telemetry import get_logger, timed
from hlsforge.domain.exceptions import EncodeException, PosterException
from hlsforge.infrastructure.video.base import ExtractedFrame, MediaEncoderBase

logger = get_logger(__name__)


class FFmpegMediaEncoder(MediaEncoderBase):
    """FFmpeg-based encoder.

    Requires ffmpeg to be installed and available in PATH.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        segment_seconds: int = 10,
        preset: str = "veryfast",
    ) -> None:
        """Initialize FFmpeg encoder.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            segment_seconds: Target HLS segment duration.
            preset: x264 preset used for renditions.
        """
        self._ffmpeg = ffmpeg_path
        self._segment_seconds = segment_seconds
        self._preset = preset

    @timed(logger=logger, level=logging.INFO, label="h264 re-encode")
    async def reencode_to_h264(self, video_path: Path, output_dir: Path) -> Path:
        output_path = output_dir / "h264.mp4"
        cmd = [
            self._ffmpeg,
            "-i",
            str(video_path),
            "-c:v",
            "libx264",
            "-preset",
            "ultrafast",
            "-crf",
            "23",
            "-c:a",
            "aac",
            "-b:a",
            "128k",
            "-y",
            str(output_path),
        ]
        await self._run(cmd, video_path, stage="h264")
        return output_path

    @timed(logger=logger, level=logging.INFO, label="rendition encode")
    async def encode_rendition(
        self,
        video_path: Path,
        output_dir: Path,
        resolution: str,
        scale_filter: str,
    ) -> Path:
        playlist_path = output_dir / f"{resolution}.m3u8"
        segment_pattern = output_dir / f"{resolution}_%03d.ts"
        cmd = [
            self._ffmpeg,
            "-i",
            str(video_path),
            "-pix_fmt",
            "yuv420p",  # 8-bit output for broad player support
            "-profile:v",
            "main",
            "-level",
            "3.1",
            "-preset",
            self._preset,
            "-vf",
            scale_filter,
            "-start_number",
            "0",
            "-hls_time",
            str(self._segment_seconds),
            "-hls_list_size",
            "0",
            "-f",
            "hls",
            "-hls_segment_filename",
            str(segment_pattern),
            str(playlist_path),
        ]
        await self._run(cmd, video_path, stage=f"rendition {resolution}")
        return playlist_path

    async def extract_frame(
        self,
        video_path: Path,
        timestamp: float,
        output_path: Path,
    ) -> ExtractedFrame:
        output_path.parent.mkdir(parents=True, exist_ok=True)

        cmd = [
            self._ffmpeg,
            "-i",
            str(video_path),
            "-vf",
            f"trim=start={timestamp:.2f}",
            "-vframes",
            "1",
            "-f",
            "image2",
            "-vcodec",
            "mjpeg",
            "-y",
            str(output_path),
        ]

        try:
            await self._run(cmd, video_path, stage="poster")
        except EncodeException as e:
            raise PosterException(str(video_path), e.reason) from e

        # ffmpeg exits 0 without writing a frame when trim lands past the end
        try:
            with Image.open(output_path) as img:
                width, height = img.size
        except (FileNotFoundError, UnidentifiedImageError) as e:
            raise PosterException(
                str(video_path), f"no frame written at {timestamp:.2f}s"
            ) from e

        return ExtractedFrame(
            path=output_path,
            timestamp=timestamp,
            width=width,
            height=height,
        )

    async def _run(self, cmd: list[str], video_path: Path, stage: str) -> None:
        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: subprocess.run(cmd, capture_output=True, check=True),
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace") if e.stderr else ""
            logger.error(
                "ffmpeg failed",
                extra={
                    "path": str(video_path),
                    "stage": stage,
                    "stderr": stderr[-2000:],
                },
            )
            raise EncodeException(
                str(video_path), stage, f"ffmpeg exited with {e.returncode}"
            ) from e
        except OSError as e:
            raise EncodeException(
                str(video_path), stage, f"cannot run ffmpeg: {e}"
            ) from e
