"""hlsforge - video upload and HLS transcoding service."""

__version__ = "0.1.0"
