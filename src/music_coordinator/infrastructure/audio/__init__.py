"""Audio infrastructure - yt-dlp media backend."""

from music_coordinator.infrastructure.audio.ytdlp_backend import (
    YtDlpBackend,
    YtDlpOpts,
    format_from_ytdlp,
    info_from_ytdlp,
)

__all__ = [
    "YtDlpBackend",
    "YtDlpOpts",
    "format_from_ytdlp",
    "info_from_ytdlp",
]
