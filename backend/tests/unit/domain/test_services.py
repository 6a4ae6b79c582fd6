"""Unit tests for the format catalog."""

from __future__ import annotations

from mediagate.domain.services.format_catalog import (
    MAX_AUDIO_FORMATS,
    audio_formats,
    summarize,
    video_formats,
)

RAW_INFO = {
    "id": "dQw4w9WgXcQ",
    "title": "Never Gonna Give You Up",
    "duration": 212.0,
    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
    "formats": [
        {"format_id": "18", "ext": "mp4", "format_note": "360p", "height": 360,
         "vcodec": "avc1.42001E", "acodec": "mp4a.40.2"},
        {"format_id": "22", "ext": "mp4", "format_note": "720p", "height": 720,
         "vcodec": "avc1.64001F", "acodec": "mp4a.40.2"},
        {"format_id": "137", "ext": "mp4", "format_note": "1080p", "height": 1080,
         "vcodec": "avc1.640028", "acodec": "none"},
        {"format_id": "140", "ext": "m4a", "format_note": "medium",
         "vcodec": "none", "acodec": "mp4a.40.2", "abr": 129.478},
        {"format_id": "251", "ext": "webm", "format_note": "medium",
         "vcodec": "none", "acodec": "opus", "abr": 135.2},
        {"format_id": "249", "ext": "webm", "format_note": "low",
         "vcodec": "none", "acodec": "opus", "abr": 50.1},
    ],
}


class TestVideoFormats:
    def test_only_muxed_streams_highest_first(self) -> None:
        result = video_formats(RAW_INFO["formats"])
        assert [(v.quality, v.itag, v.format) for v in result] == [
            ("720p", "22", "mp4"),
            ("360p", "18", "mp4"),
        ]
        assert all(v.has_audio and v.has_video for v in result)

    def test_duplicate_quality_keeps_first(self) -> None:
        formats = [
            {"format_id": "18", "ext": "mp4", "height": 360, "vcodec": "avc1", "acodec": "mp4a"},
            {"format_id": "43", "ext": "webm", "height": 360, "vcodec": "vp8", "acodec": "vorbis"},
        ]
        result = video_formats(formats)
        assert [(v.quality, v.itag) for v in result] == [("360p", "18")]

    def test_label_falls_back_to_format_id(self) -> None:
        formats = [{"format_id": "hls-1", "ext": "mp4", "vcodec": "avc1", "acodec": "mp4a"}]
        assert video_formats(formats)[0].quality == "hls-1"


class TestAudioFormats:
    def test_audio_only_best_bitrate_first(self) -> None:
        result = audio_formats(RAW_INFO["formats"])
        assert [(a.quality, a.itag) for a in result] == [
            ("135kbps", "251"),
            ("129kbps", "140"),
            ("50kbps", "249"),
        ]

    def test_capped(self) -> None:
        formats = [
            {"format_id": str(i), "vcodec": "none", "acodec": "opus", "abr": float(i)}
            for i in range(1, 9)
        ]
        result = audio_formats(formats)
        assert len(result) == MAX_AUDIO_FORMATS
        assert result[0].itag == "8"

    def test_missing_bitrate(self) -> None:
        (only,) = audio_formats([{"format_id": "a", "vcodec": "none", "acodec": "aac"}])
        assert only.quality == "unknown"
        assert only.audio_bitrate == 0.0


class TestSummarize:
    def test_full_summary(self) -> None:
        info = summarize(RAW_INFO)
        assert info.title == "Never Gonna Give You Up"
        assert info.duration == 212
        assert info.thumbnail.endswith("maxresdefault.jpg")
        assert len(info.video_formats) == 2
        assert len(info.audio_formats) == 3

    def test_thumbnail_fallback_and_missing_fields(self) -> None:
        info = summarize({"title": "clip", "thumbnails": [{"url": "https://img.test/1.jpg"}]})
        assert info.thumbnail == "https://img.test/1.jpg"
        assert info.duration is None
        assert info.video_formats == []
        assert info.audio_formats == []
