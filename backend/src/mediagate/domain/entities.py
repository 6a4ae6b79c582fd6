"""Domain entities — media summaries and download requests."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

from mediagate.domain.enums import MediaKind
from mediagate.domain.exceptions import ValidationError

_UNSAFE_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_QUALITY_HEIGHT = re.compile(r"^(\d+)")


def validate_media_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ValidationError("URL is required")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Unsupported media URL: {url!r}")
    return url


def safe_filename(title: str, *, fallback: str = "media") -> str:
    """Strip everything but word chars, spaces and hyphens; whitespace runs become ``_``."""
    cleaned = _WHITESPACE.sub("_", _UNSAFE_CHARS.sub("", title).strip())
    return cleaned or fallback


@dataclass(frozen=True, slots=True)
class VideoFormat:
    quality: str
    format: str
    itag: str
    has_audio: bool = True
    has_video: bool = True


@dataclass(frozen=True, slots=True)
class AudioFormat:
    quality: str
    itag: str
    audio_bitrate: float = 0.0


@dataclass(frozen=True, slots=True)
class MediaInfo:
    """What a client needs to choose a download."""

    title: str
    duration: int | None = None
    thumbnail: str | None = None
    video_formats: list[VideoFormat] = field(default_factory=list)
    audio_formats: list[AudioFormat] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DownloadRequest:
    """A validated download request.

    ``quality`` is a height label such as ``"720p"`` for video and is ignored
    for audio, which always takes the best audio-only stream.
    """

    url: str
    kind: MediaKind = MediaKind.VIDEO
    quality: str | None = None
    video_only: bool = False

    def __post_init__(self) -> None:
        validate_media_url(self.url)

    @property
    def max_height(self) -> int | None:
        if not self.quality:
            return None
        match = _QUALITY_HEIGHT.match(self.quality.strip())
        return int(match.group(1)) if match else None

    def format_selector(self) -> str:
        """yt-dlp format selector for this request."""
        if self.kind is MediaKind.AUDIO:
            return "bestaudio/best"
        height = f"[height<={self.max_height}]" if self.max_height else ""
        if self.video_only:
            return f"bestvideo{height}/bestvideo"
        return f"best{height}[vcodec!=none][acodec!=none]/best[vcodec!=none][acodec!=none]/best"
