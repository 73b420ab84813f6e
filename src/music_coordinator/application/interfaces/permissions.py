"""Port interface for channel capability checks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import Capability


class PermissionChecker(ABC):
    @abstractmethod
    def has_capability(
        self, guild_id: int, actor_id: int, channel_id: int, *capabilities: "Capability"
    ) -> bool:
        """True when ``actor_id`` holds every capability in the channel."""
        ...
