"""Reference Resolver - turns a media reference into playable stream metadata."""

from __future__ import annotations

import hashlib
import logging
import re
import time
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError as PydanticValidationError

from ...domain.music.entities import StreamMetadata
from ...domain.music.format_selection import select_best_audio
from ...domain.music.policies import (
    CACHE_KEY_PREFIX,
    CANONICAL_URL_TEMPLATE,
    DEFAULT_CACHE_TTL_SECONDS,
    EXPIRY_SAFETY_MARGIN_SECONDS,
)
from ...domain.shared.exceptions import (
    NoMediaFoundError,
    NoPlayableAudioError,
    ResolutionFailedError,
)
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.music.format_selection import SelectedAudio
    from ...domain.music.media_info import RawMediaInfo
    from ..interfaces.cache_store import CacheStore
    from ..interfaces.media_backend import MediaBackend

logger = logging.getLogger(__name__)

EXPIRE_PARAM_PATTERN: Final[re.Pattern[str]] = re.compile(r"[?&]expire=([0-9]+)")
LOG_REFERENCE_TRUNCATE: Final[int] = 60


def normalize_reference(reference: str) -> str:
    return reference.strip()


def cache_key_for(reference: str, prefix: str = CACHE_KEY_PREFIX) -> str:
    """Stable cache key: prefix plus the sha256 hex digest of the normalized reference."""
    digest = hashlib.sha256(normalize_reference(reference).encode("utf-8")).hexdigest()
    return f"{prefix}{digest}"


def expiry_from_url(url: str, margin: int = EXPIRY_SAFETY_MARGIN_SECONDS) -> int | None:
    """Absolute expiry taken from a signed ``expire=`` query parameter, minus ``margin``."""
    match = EXPIRE_PARAM_PATTERN.search(url)
    if not match:
        return None
    return max(0, int(match.group(1)) - margin)


class ReferenceResolver:
    """Resolves references through a best-effort cache and a media backend.

    Cache failures never reach the caller: any error reading or decoding an
    entry is logged and handled as a miss, and write failures are logged
    and dropped.
    """

    def __init__(
        self,
        *,
        backend: MediaBackend,
        cache: CacheStore | None = None,
        key_prefix: str = CACHE_KEY_PREFIX,
        default_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        expiry_margin_seconds: int = EXPIRY_SAFETY_MARGIN_SECONDS,
    ) -> None:
        self._backend = backend
        self._cache = cache
        self._key_prefix = key_prefix
        self._default_ttl = default_ttl_seconds
        self._expiry_margin = expiry_margin_seconds

    def cache_key(self, reference: str) -> str:
        return cache_key_for(reference, self._key_prefix)

    async def resolve(
        self, reference: str, fetch_all: bool = False
    ) -> StreamMetadata | dict[str, Any]:
        """Resolve a reference.

        Args:
            reference: The raw media reference, usually a URL.
            fetch_all: Return the backend's full info instead of trimmed metadata.

        Returns:
            The cached or freshly resolved ``StreamMetadata``, or the raw info
            dict when ``fetch_all`` is set and the cache missed.

        Raises:
            ResolutionFailedError: The backend lookup raised.
            NoMediaFoundError: The lookup returned nothing with an identity.
            NoPlayableAudioError: No audio-capable stream with a URL exists.
        """
        normalized = normalize_reference(reference)
        key = self.cache_key(normalized)

        cached = await self._read_cache(key)
        if cached is not None:
            return cached

        short_ref = normalized[:LOG_REFERENCE_TRUNCATE]
        logger.debug(LogTemplates.RESOLVING, short_ref)
        try:
            info = await self._backend.fetch_info(normalized)
        except Exception as exc:
            logger.warning(LogTemplates.RESOLVE_FAILED, short_ref, exc_info=True)
            raise ResolutionFailedError(normalized, str(exc)) from exc

        if info is None or not info.video_id:
            raise NoMediaFoundError(normalized)

        selected = select_best_audio(info.formats)
        if selected is None:
            logger.warning(LogTemplates.NO_AUDIO_CANDIDATE, len(info.formats), short_ref)
            raise NoPlayableAudioError(normalized)

        metadata = self._build_metadata(info, selected)
        logger.info(
            LogTemplates.RESOLVED,
            short_ref,
            metadata.video_id,
            metadata.audioformat.value if metadata.audioformat else None,
            metadata.audiotype,
            metadata.expires,
        )
        await self._write_cache(key, metadata)

        if fetch_all:
            raw = info.model_dump()
            raw["url"] = metadata.url
            raw["expires"] = metadata.expires
            return raw
        return metadata

    def _build_metadata(self, info: RawMediaInfo, selected: SelectedAudio) -> StreamMetadata:
        video_id = info.video_id or ""
        return StreamMetadata(
            video_id=video_id,
            title=info.title,
            thumbnail_url=info.thumbnail_url,
            url=CANONICAL_URL_TEMPLATE.format(video_id=video_id),
            audiourl=selected.url,
            audioformat=selected.family,
            audiotype=selected.itag,
            expires=expiry_from_url(selected.url, self._expiry_margin),
            length=info.length_seconds,
        )

    async def _read_cache(self, key: str) -> StreamMetadata | None:
        if self._cache is None:
            return None

        try:
            raw = await self._cache.get(key)
        except Exception as exc:
            logger.debug(LogTemplates.CACHE_READ_FAILED, key, exc)
            return None

        if not raw:
            logger.debug(LogTemplates.CACHE_MISS, key)
            return None

        try:
            metadata = StreamMetadata.model_validate_json(raw)
        except (PydanticValidationError, ValueError) as exc:
            logger.debug(LogTemplates.CACHE_ENTRY_CORRUPT, key, exc)
            return None

        if metadata.is_expired():
            logger.debug(LogTemplates.CACHE_ENTRY_STALE, key, metadata.expires)
            return None

        logger.debug(LogTemplates.CACHE_HIT, key)
        return metadata

    async def _write_cache(self, key: str, metadata: StreamMetadata) -> None:
        if self._cache is None:
            return

        ttl = metadata.ttl_seconds(self._default_ttl, now=time.time())
        try:
            await self._cache.set(key, metadata.model_dump_json(), ttl)
        except Exception as exc:
            logger.debug(LogTemplates.CACHE_WRITE_FAILED, key, exc)
