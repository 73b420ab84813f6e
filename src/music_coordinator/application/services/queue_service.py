"""Playback Queue service - per-guild queue operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.shared.exceptions import QueueEmptyError
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import QueueItem
    from .session_registry import SessionRegistry


class QueueService:
    """Queue operations addressed by guild ID.

    Admission limits (duration, validity) are enforced by the coordinator
    before items reach this service; the queue itself is unbounded.
    """

    def __init__(self, *, session_registry: SessionRegistry) -> None:
        self._registry = session_registry

    def add(self, guild_id: DiscordSnowflake, item: QueueItem, play_now: bool = False) -> QueueItem:
        """Append the item, or insert it at the front when ``play_now``."""
        return self._registry.get_or_create(guild_id).queue.add(item, play_now=play_now)

    def length(self, guild_id: DiscordSnowflake) -> int:
        session = self._registry.get(guild_id)
        return len(session.queue) if session else 0

    def shift(self, guild_id: DiscordSnowflake) -> QueueItem:
        session = self._registry.get(guild_id)
        if session is None:
            raise QueueEmptyError(guild_id)
        try:
            return session.queue.shift()
        except QueueEmptyError as exc:
            raise QueueEmptyError(guild_id) from exc

    def remove(self, guild_id: DiscordSnowflake) -> int:
        """Clear the whole queue for a guild and return how many items were dropped."""
        session = self._registry.get(guild_id)
        if session is None:
            return 0
        return session.queue.clear()

    def items(self, guild_id: DiscordSnowflake) -> list[QueueItem]:
        session = self._registry.get(guild_id)
        return session.queue.snapshot() if session else []
