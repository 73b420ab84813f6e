"""Pydantic models for raw resolver backend data.

Backends translate whatever their extractor returns into these models.
Before-validators coerce garbage from external data gracefully instead of
failing the whole lookup.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_optional_int(v: Any) -> int | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return None


def _coerce_optional_str(v: Any) -> str | None:
    if not isinstance(v, str) or not v.strip():
        return None
    return v


class RawFormat(BaseModel):
    """A single candidate stream reported by the backend."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    itag: int | None = None
    audio_bitrate: int | None = None
    # Video bitrate; set only for streams that also carry video.
    bitrate: int | None = None
    container: str | None = None
    url: str | None = None

    @field_validator("itag", "audio_bitrate", "bitrate", mode="before")
    @classmethod
    def _coerce_numbers(cls, v: Any) -> int | None:
        return _coerce_optional_int(v)

    @field_validator("container", "url", mode="before")
    @classmethod
    def _coerce_strings(cls, v: Any) -> str | None:
        return _coerce_optional_str(v)

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_bitrate and self.audio_bitrate > 0)

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.bitrate


class RawMediaInfo(BaseModel):
    """Full lookup result for one reference."""

    model_config = ConfigDict(frozen=True, extra="allow")

    video_id: str | None = None
    title: str = "Unknown Title"
    thumbnail_url: str | None = None
    length_seconds: int | None = None
    formats: list[RawFormat] = Field(default_factory=list)

    @field_validator("video_id", "thumbnail_url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        return _coerce_optional_str(v)

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v

    @field_validator("length_seconds", mode="before")
    @classmethod
    def _coerce_length(cls, v: Any) -> int | None:
        val = _coerce_optional_int(v)
        return val if val is not None and val >= 0 else None
