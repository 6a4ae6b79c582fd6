"""Domain enumerations for the media gateway."""

from __future__ import annotations

import enum


class MediaKind(str, enum.Enum):
    """What a download should produce."""

    VIDEO = "video"
    AUDIO = "audio"
