"""ffprobe implementation of media probing."""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any

from hlsforge.commons.telemetry import get_logger
from hlsforge.domain.exceptions import ProbeException
from hlsforge.infrastructure.video.base import MediaProbeBase, VideoDimensions


class FFprobeMediaProbe(MediaProbeBase):
    """ffprobe-based media probe.

    Requires ffprobe to be installed and available in PATH.
    """

    def __init__(self, ffprobe_path: str = "ffprobe") -> None:
        self._ffprobe = ffprobe_path
        self._logger = get_logger(__name__)

    async def get_duration(self, video_path: Path) -> float:
        data = await self._probe(video_path, ["-show_entries", "format=duration"])

        raw = data.get("format", {}).get("duration")
        if raw in (None, "", "N/A"):
            raise ProbeException(str(video_path), "no duration reported")
        try:
            duration = float(raw)
        except (TypeError, ValueError) as e:
            raise ProbeException(str(video_path), f"bad duration {raw!r}") from e
        if duration <= 0:
            raise ProbeException(str(video_path), f"bad duration {raw!r}")
        return duration

    async def get_codec(self, video_path: Path) -> str:
        stream = await self._video_stream(video_path, "codec_name")
        codec = str(stream.get("codec_name", "")).strip()
        if not codec:
            raise ProbeException(str(video_path), "no codec reported")
        return codec

    async def get_dimensions(self, video_path: Path) -> VideoDimensions:
        stream = await self._video_stream(video_path, "width,height")
        try:
            width = int(stream["width"])
            height = int(stream["height"])
        except (KeyError, TypeError, ValueError) as e:
            raise ProbeException(str(video_path), "invalid video dimensions") from e
        return VideoDimensions(width=width, height=height)

    async def _video_stream(self, video_path: Path, entries: str) -> dict[str, Any]:
        data = await self._probe(
            video_path,
            ["-select_streams", "v:0", "-show_entries", f"stream={entries}"],
        )
        streams = data.get("streams") or []
        if not streams:
            raise ProbeException(str(video_path), "no video stream found")
        return dict(streams[0])

    async def _probe(self, video_path: Path, args: list[str]) -> dict[str, Any]:
        cmd = [
            self._ffprobe,
            "-v",
            "error",
            *args,
            "-of",
            "json",
            str(video_path),
        ]

        loop = asyncio.get_event_loop()
        try:
            result = await loop.run_in_executor(
                None,
                lambda: subprocess.run(cmd, capture_output=True, check=True),
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace") if e.stderr else ""
            self._logger.error(
                "ffprobe failed",
                extra={"path": str(video_path), "stderr": stderr[-2000:]},
            )
            raise ProbeException(
                str(video_path), f"ffprobe exited with {e.returncode}"
            ) from e
        except OSError as e:
            raise ProbeException(str(video_path), f"cannot run ffprobe: {e}") from e

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ProbeException(str(video_path), "unparseable ffprobe output") from e
        if not isinstance(data, dict):
            raise ProbeException(str(video_path), "unparseable ffprobe output")
        return data
