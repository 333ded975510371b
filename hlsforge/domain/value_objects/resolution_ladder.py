"""Resolution ladder and master playlist rendering."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

MASTER_PLAYLIST_NAME = "playlist.m3u8"


@dataclass(frozen=True)
class StreamTier:
    """Bandwidth and frame size advertised for one rendition."""

    resolution: str
    bandwidth: int
    frame_size: str


# Canonical tiers, in master playlist order
STREAM_TIERS: dict[str, StreamTier] = {
    "360": StreamTier("360", 800_000, "640x360"),
    "480": StreamTier("480", 1_400_000, "854x480"),
    "720": StreamTier("720", 2_800_000, "1280x720"),
    "1080": StreamTier("1080", 5_000_000, "1920x1080"),
}


class ResolutionLadder(BaseModel):
    """Target renditions for one transcode.

    Examples:
        >>> ResolutionLadder(resolutions=["1080", "360", "720"]).ascending()
        ['360', '720', '1080']
    """

    model_config = ConfigDict(frozen=True)

    resolutions: list[str] = Field(min_length=1)

    @field_validator("resolutions")
    @classmethod
    def validate_numeric(cls, v: list[str]) -> list[str]:
        for res in v:
            if not res.isdigit():
                raise ValueError(f"Resolution must be numeric: '{res}'")
        return v

    def ascending(self) -> list[str]:
        """Resolutions sorted by numeric value, whatever the configured order."""
        return sorted(self.resolutions, key=int)

    def highest(self) -> str:
        return self.ascending()[-1]

    @staticmethod
    def scale_filter(resolution: str, width: int, height: int) -> str:
        """ffmpeg scale expression for a rendition.

        Portrait sources constrain the width, landscape ones the height; the
        other side keeps the aspect ratio rounded to an even number.
        """
        if height > width:
            return f"scale={resolution}:-2"
        return f"scale=-2:{resolution}"

    def master_playlist(self, fingerprint: str) -> str:
        """Render the master playlist for the renditions in this ladder.

        Entries follow the canonical tier order; resolutions without a known
        tier are skipped.
        """
        produced = set(self.resolutions)
        lines = ["#EXTM3U", "#EXT-X-VERSION:3"]
        for res, tier in STREAM_TIERS.items():
            if res not in produced:
                continue
            lines.append(
                f"#EXT-X-STREAM-INF:BANDWIDTH={tier.bandwidth},"
                f"RESOLUTION={tier.frame_size}"
            )
            lines.append(f"{fingerprint}/{res}.m3u8")
        return "\n".join(lines) + "\n"
