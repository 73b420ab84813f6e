"""Port interface for the media lookup behind the reference resolver."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.media_info import RawMediaInfo


class MediaBackend(ABC):
    """Looks an external reference up and lists its candidate streams."""

    @abstractmethod
    async def fetch_info(self, reference: str) -> "RawMediaInfo":
        """Fetch raw info for a reference.

        Raises whatever the underlying extractor raises; the resolver wraps
        it into ``ResolutionFailedError``.
        """
        ...
