"""MediaBackend implementation using yt-dlp for stream lookups."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

from pydantic import BaseModel, ConfigDict
from yt_dlp import YoutubeDL

from music_coordinator.application.interfaces.media_backend import MediaBackend
from music_coordinator.config.settings import YtDlpSettings
from music_coordinator.domain.music.media_info import RawFormat, RawMediaInfo
from music_coordinator.domain.shared.messages import LogTemplates
from music_coordinator.domain.shared.types import NonEmptyStr, PositiveInt

logger = logging.getLogger(__name__)

DEFAULT_HTTP_CHUNK_SIZE: Final[int] = 1024 * 1024  # 1 MiB
LOG_URL_TRUNCATE: Final[int] = 60
NO_CODEC: Final[str] = "none"

# yt-dlp reports DASH containers as e.g. "webm_dash"; m4a audio is an mp4 container.
CONTAINER_ALIASES: Final[dict[str, str]] = {"m4a": "mp4"}
DASH_SUFFIX: Final[str] = "_dash"
MAPPED_INFO_KEYS: Final[frozenset[str]] = frozenset(
    {"id", "title", "thumbnail", "duration", "formats"}
)


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    forceipv4: bool = True
    retries: PositiveInt = 3
    socket_timeout: PositiveInt = 10
    http_chunk_size: PositiveInt = DEFAULT_HTTP_CHUNK_SIZE
    skip_download: bool = True
    default_search: NonEmptyStr = "ytsearch"


def _container_of(fmt: dict[str, Any]) -> str | None:
    container = fmt.get("container") or fmt.get("ext")
    if not isinstance(container, str) or not container:
        return None
    container = container.removesuffix(DASH_SUFFIX)
    return CONTAINER_ALIASES.get(container, container)


def format_from_ytdlp(fmt: dict[str, Any]) -> RawFormat:
    """Map one yt-dlp format dict onto the backend-neutral ``RawFormat``."""
    has_audio = fmt.get("acodec") != NO_CODEC
    has_video = fmt.get("vcodec") not in (None, NO_CODEC)
    return RawFormat(
        itag=fmt.get("format_id"),
        audio_bitrate=fmt.get("abr") if has_audio else None,
        bitrate=(fmt.get("vbr") or fmt.get("tbr")) if has_video else None,
        container=_container_of(fmt),
        url=fmt.get("url"),
    )


def info_from_ytdlp(data: dict[str, Any]) -> RawMediaInfo:
    """Map a yt-dlp info dict onto ``RawMediaInfo``.

    Formats that are not plain dicts are dropped; everything else yt-dlp
    returns is kept as extra fields so ``fetch_all`` callers still see it.
    """
    raw_formats = data.get("formats") or []
    formats = [format_from_ytdlp(f) for f in raw_formats if isinstance(f, dict)]
    extras = {k: v for k, v in data.items() if k not in MAPPED_INFO_KEYS}
    return RawMediaInfo.model_validate(
        {
            **extras,
            "video_id": data.get("id"),
            "title": data.get("title"),
            "thumbnail_url": data.get("thumbnail"),
            "length_seconds": data.get("duration"),
            "formats": formats,
        }
    )


class YtDlpBackend(MediaBackend):
    def __init__(self, settings: YtDlpSettings | None = None) -> None:
        self._settings = settings or YtDlpSettings()
        self._opts = YtDlpOpts(
            forceipv4=self._settings.forceipv4,
            retries=max(1, self._settings.retries),
            socket_timeout=self._settings.socket_timeout,
        )

    @property
    def opts(self) -> YtDlpOpts:
        return self._opts

    def _extract_info_sync(self, reference: str) -> RawMediaInfo:
        with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
            data = ydl.extract_info(reference, download=False)

        if not isinstance(data, dict):
            return RawMediaInfo()

        # Searches and playlists wrap the actual video in ``entries``.
        entries = data.get("entries")
        if isinstance(entries, list):
            first = next((e for e in entries if isinstance(e, dict)), None)
            return info_from_ytdlp(first) if first else RawMediaInfo()

        return info_from_ytdlp(dict(data))

    async def fetch_info(self, reference: str) -> RawMediaInfo:
        try:
            return await asyncio.to_thread(self._extract_info_sync, reference)
        except Exception:
            logger.debug(LogTemplates.RESOLVE_FAILED, reference[:LOG_URL_TRUNCATE])
            raise
