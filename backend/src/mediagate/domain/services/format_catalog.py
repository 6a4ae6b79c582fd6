"""Format catalog — condenses raw media-library metadata into a ``MediaInfo``.

Video choices are the muxed (audio + video) streams, one per quality label,
highest resolution first. Audio choices are audio-only streams, best bitrate
first, capped at five.
"""

from __future__ import annotations

import re
from typing import Any

from mediagate.domain.entities import AudioFormat, MediaInfo, VideoFormat

MAX_AUDIO_FORMATS = 5

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _has_video(fmt: dict[str, Any]) -> bool:
    vcodec = fmt.get("vcodec")
    return bool(vcodec) and vcodec != "none"


def _has_audio(fmt: dict[str, Any]) -> bool:
    acodec = fmt.get("acodec")
    return bool(acodec) and acodec != "none"


def _quality_label(fmt: dict[str, Any]) -> str:
    if fmt.get("format_note"):
        return str(fmt["format_note"])
    if fmt.get("height"):
        return f"{fmt['height']}p"
    return str(fmt.get("format_id", "unknown"))


def _resolution(quality: str) -> int:
    match = _LEADING_INT.match(quality)
    return int(match.group(1)) if match else 0


def video_formats(formats: list[dict[str, Any]]) -> list[VideoFormat]:
    seen: set[str] = set()
    result: list[VideoFormat] = []
    for fmt in formats:
        if not (_has_video(fmt) and _has_audio(fmt)):
            continue
        quality = _quality_label(fmt)
        if quality in seen:
            continue
        seen.add(quality)
        result.append(
            VideoFormat(
                quality=quality,
                format=str(fmt.get("ext", "")),
                itag=str(fmt.get("format_id", "")),
            )
        )
    # sorted() is stable, so equal resolutions keep source order
    return sorted(result, key=lambda v: _resolution(v.quality), reverse=True)


def audio_formats(formats: list[dict[str, Any]]) -> list[AudioFormat]:
    result: list[AudioFormat] = []
    for fmt in formats:
        if not _has_audio(fmt) or _has_video(fmt):
            continue
        bitrate = fmt.get("abr") or 0
        result.append(
            AudioFormat(
                quality=f"{round(bitrate)}kbps" if bitrate else "unknown",
                itag=str(fmt.get("format_id", "")),
                audio_bitrate=float(bitrate),
            )
        )
    result.sort(key=lambda a: a.audio_bitrate, reverse=True)
    return result[:MAX_AUDIO_FORMATS]


def summarize(raw: dict[str, Any]) -> MediaInfo:
    formats = raw.get("formats") or []
    thumbnail = raw.get("thumbnail")
    if not thumbnail and raw.get("thumbnails"):
        thumbnail = raw["thumbnails"][0].get("url")
    duration = raw.get("duration")
    return MediaInfo(
        title=str(raw.get("title") or ""),
        duration=int(duration) if duration is not None else None,
        thumbnail=thumbnail,
        video_formats=video_formats(formats),
        audio_formats=audio_formats(formats),
    )
