"""Business-rule tables for resolution, admission and playback.

These rules have no derivation of their own; they are kept here as named
constants so each one can be tested on its own.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from typing import Final

from music_coordinator.domain.music.value_objects import AudioFamily, Capability


@dataclass(frozen=True)
class FormatFamilyRule:
    """One step of the best-audio search.

    A format matches when its itag is in ``itags`` or, for rules without
    itags, when its container equals ``container``.
    """

    family: AudioFamily
    itags: tuple[int, ...] = ()
    container: str | None = None

    def matches(self, itag: int | None, container: str | None) -> bool:
        if self.itags:
            return itag is not None and itag in self.itags
        return self.container is not None and container == self.container


WEBM_AUDIO_ITAGS: Final[tuple[int, ...]] = (249, 250, 251)
MP4_AUDIO_ITAGS: Final[tuple[int, ...]] = (141, 140, 139)
GENERIC_AUDIO_CONTAINER: Final[str] = "mp4"

# Checked in order; the first rule with any matching format wins.
AUDIO_FAMILY_PRIORITY: Final[tuple[FormatFamilyRule, ...]] = (
    FormatFamilyRule(AudioFamily.WEBM, itags=WEBM_AUDIO_ITAGS),
    FormatFamilyRule(AudioFamily.MP4, itags=MP4_AUDIO_ITAGS),
    FormatFamilyRule(AudioFamily.MP4, container=GENERIC_AUDIO_CONTAINER),
)

EXPIRY_SAFETY_MARGIN_SECONDS: Final[int] = 900
DEFAULT_CACHE_TTL_SECONDS: Final[int] = 21600
MAX_DURATION_SECONDS: Final[int] = 5400
DEFAULT_VOLUME_SCALAR: Final[float] = 2.0
VOLUME_PERCENT_FACTOR: Final[int] = 2

CACHE_KEY_PREFIX: Final[str] = "music:info:"
CANONICAL_URL_TEMPLATE: Final[str] = "https://www.youtube.com/watch?v={video_id}"
DISALLOWED_REFERENCE_CHARS: Final[str] = "<>"

REQUIRED_VOICE_CAPABILITIES: Final[tuple[Capability, ...]] = (
    Capability.VOICE_CONNECT,
    Capability.VOICE_SPEAK,
)


def is_bot_alone(member_ids: Collection[int], bot_user_id: int) -> bool:
    """True when the channel holds exactly one member and it is the bot."""
    return len(member_ids) == 1 and bot_user_id in member_ids


def volume_scalar(percent: int) -> float:
    """Convert a user-facing percentage into the player's multiplier."""
    return (percent * VOLUME_PERCENT_FACTOR) / 100


def strip_reference(reference: str) -> str:
    return "".join(ch for ch in reference if ch not in DISALLOWED_REFERENCE_CHARS).strip()
