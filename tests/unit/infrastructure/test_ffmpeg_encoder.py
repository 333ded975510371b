"""Unit tests for the FFmpeg encoder."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from hlsforge.domain.exceptions import EncodeException, PosterException
from hlsforge.infrastructure.video import FFmpegMediaEncoder


@pytest.fixture
def encoder():
    return FFmpegMediaEncoder(ffmpeg_path="ffmpeg", segment_seconds=6, preset="fast")


@pytest.fixture
def run_mock():
    with patch("hlsforge.infrastructure.video.ffmpeg_encoder.subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0)
        yield mock


def _arg_after(cmd: list[str], flag: str) -> str:
    return cmd[cmd.index(flag) + 1]


class TestReencodeToH264:
    """Tests for the HEVC fallback re-encode."""

    async def test_writes_h264_mp4(self, encoder, run_mock, tmp_path):
        source = tmp_path / "clip.mov"

        output = await encoder.reencode_to_h264(source, tmp_path)

        assert output == tmp_path / "h264.mp4"
        cmd = run_mock.call_args.args[0]
        assert _arg_after(cmd, "-i") == str(source)
        assert _arg_after(cmd, "-c:v") == "libx264"
        assert _arg_after(cmd, "-preset") == "ultrafast"
        assert _arg_after(cmd, "-crf") == "23"
        assert _arg_after(cmd, "-c:a") == "aac"
        assert _arg_after(cmd, "-b:a") == "128k"
        assert cmd[-1] == str(output)

    async def test_failure_names_stage(self, encoder, run_mock, tmp_path):
        run_mock.side_effect = subprocess.CalledProcessError(
            1, ["ffmpeg"], stderr=b"Invalid data"
        )

        with pytest.raises(EncodeException) as exc_info:
            await encoder.reencode_to_h264(tmp_path / "clip.mov", tmp_path)

        assert exc_info.value.stage == "h264"
        assert exc_info.value.reason == "ffmpeg exited with 1"


class TestEncodeRendition:
    """Tests for per-resolution HLS encodes."""

    async def test_hls_arguments(self, encoder, run_mock, tmp_path):
        source = tmp_path / "clip.mp4"

        playlist = await encoder.encode_rendition(
            source, tmp_path, "720", "scale=-2:720"
        )

        assert playlist == tmp_path / "720.m3u8"
        cmd = run_mock.call_args.args[0]
        assert _arg_after(cmd, "-vf") == "scale=-2:720"
        assert _arg_after(cmd, "-pix_fmt") == "yuv420p"
        assert _arg_after(cmd, "-profile:v") == "main"
        assert _arg_after(cmd, "-level") == "3.1"
        assert _arg_after(cmd, "-preset") == "fast"
        assert _arg_after(cmd, "-start_number") == "0"
        assert _arg_after(cmd, "-hls_time") == "6"
        assert _arg_after(cmd, "-hls_list_size") == "0"
        assert _arg_after(cmd, "-f") == "hls"
        assert _arg_after(cmd, "-hls_segment_filename") == str(
            tmp_path / "720_%03d.ts"
        )
        assert cmd[-1] == str(playlist)

    async def test_missing_binary(self, encoder, run_mock, tmp_path):
        run_mock.side_effect = FileNotFoundError("ffmpeg")

        with pytest.raises(EncodeException, match="cannot run ffmpeg") as exc_info:
            await encoder.encode_rendition(
                tmp_path / "clip.mp4", tmp_path, "360", "scale=-2:360"
            )

        assert exc_info.value.stage == "rendition 360"


class TestExtractFrame:
    """Tests for poster frame grabs."""

    async def test_extracts_and_measures_frame(self, encoder, run_mock, tmp_path):
        output = tmp_path / "asset" / "15.000000.jpg"

        def write_frame(cmd, **kwargs):
            Image.new("RGB", (64, 36)).save(Path(cmd[-1]), format="JPEG")
            return MagicMock(returncode=0)

        run_mock.side_effect = write_frame

        frame = await encoder.extract_frame(tmp_path / "seg.ts", 5.0, output)

        assert frame.path == output
        assert frame.timestamp == 5.0
        assert (frame.width, frame.height) == (64, 36)
        cmd = run_mock.call_args.args[0]
        assert _arg_after(cmd, "-vf") == "trim=start=5.00"
        assert _arg_after(cmd, "-vframes") == "1"
        assert _arg_after(cmd, "-vcodec") == "mjpeg"

    async def test_no_frame_written(self, encoder, run_mock, tmp_path):
        with pytest.raises(PosterException, match="no frame written at 99.00s"):
            await encoder.extract_frame(
                tmp_path / "seg.ts", 99.0, tmp_path / "99.000000.jpg"
            )

    async def test_ffmpeg_failure_becomes_poster_error(
        self, encoder, run_mock, tmp_path
    ):
        run_mock.side_effect = subprocess.CalledProcessError(1, ["ffmpeg"])

        with pytest.raises(PosterException, match="ffmpeg exited with 1"):
            await encoder.extract_frame(
                tmp_path / "seg.ts", 1.0, tmp_path / "1.000000.jpg"
            )
