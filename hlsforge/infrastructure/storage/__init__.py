"""Asset storage."""

from hlsforge.infrastructure.storage.local import LocalVideoStorage

__all__ = ["LocalVideoStorage"]
