"""Data Transfer Objects — Pydantic models for API boundaries.

DTOs handle serialisation, validation, and documentation.  They live in the
application layer because they are *not* domain objects — they adapt between
the external world and the domain.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mediagate.domain.enums import MediaKind


# ═══════════════════════════════════════════════════════════════
#  Common
# ═══════════════════════════════════════════════════════════════
class ErrorResponse(BaseModel):
    code: str
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime
    enabled_routes: int = 0


# ═══════════════════════════════════════════════════════════════
#  Media
# ═══════════════════════════════════════════════════════════════
class MediaInfoRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)


class VideoFormatDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quality: str
    format: str
    itag: str
    has_audio: bool
    has_video: bool


class AudioFormatDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quality: str
    itag: str
    audio_bitrate: float


class MediaInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str
    duration: int | None = None
    thumbnail: str | None = None
    video_formats: list[VideoFormatDTO] = Field(default_factory=list)
    audio_formats: list[AudioFormatDTO] = Field(default_factory=list)


class DownloadRequestDTO(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    kind: MediaKind = MediaKind.VIDEO
    quality: str | None = Field(None, max_length=16, description="Height label, e.g. '720p'")
    video_only: bool = False


# ═══════════════════════════════════════════════════════════════
#  Routes
# ═══════════════════════════════════════════════════════════════
class RouteProviderDTO(BaseModel):
    name: str
    priority: int
    kind: str
    enabled: bool


class ProbeResultDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider: str
    ok: bool
    latency_ms: float = 0.0
    exit_ip: str | None = None
    error: str | None = None
