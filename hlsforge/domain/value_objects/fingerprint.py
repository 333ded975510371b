"""Upload fingerprint value object."""

from __future__ import annotations

import hashlib
import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

# sha256 hex digest
FINGERPRINT_PATTERN = re.compile(r"^[0-9a-f]{64}$")


class Fingerprint(BaseModel):
    """Dedup key and directory name of an uploaded video.

    Derived from the upload's filename and byte size only, not its content:
    two different files sharing name and size collide.

    Examples:
        >>> fp = Fingerprint.from_upload("clip.mp4", 1024)
        >>> fp.value == Fingerprint.from_upload("clip.mp4", 1024).value
        True
    """

    model_config = ConfigDict(frozen=True)

    value: Annotated[
        str,
        Field(min_length=64, max_length=64, description="sha256 hex digest"),
    ]

    @field_validator("value")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate that the value is a lowercase sha256 hex digest."""
        if not FINGERPRINT_PATTERN.match(v):
            raise ValueError(f"Invalid fingerprint format: '{v}'")
        return v

    @classmethod
    def from_upload(cls, filename: str, size: int) -> Fingerprint:
        """Compute the fingerprint for an upload.

        Args:
            filename: Original filename as sent by the client.
            size: Upload size in bytes.

        Returns:
            Deterministic fingerprint for the (filename, size) pair.
        """
        digest = hashlib.sha256(f"{filename}-{size}".encode()).hexdigest()
        return cls(value=digest)

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check whether a string looks like a fingerprint."""
        return bool(FINGERPRINT_PATTERN.match(value))

    def __str__(self) -> str:
        return self.value
