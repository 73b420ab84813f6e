"""Best-audio stream selection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from music_coordinator.domain.music.media_info import RawFormat
from music_coordinator.domain.music.policies import AUDIO_FAMILY_PRIORITY, FormatFamilyRule
from music_coordinator.domain.music.value_objects import AudioFamily


@dataclass(frozen=True)
class SelectedAudio:
    """The chosen stream tagged with the family it was picked from."""

    format: RawFormat
    family: AudioFamily

    @property
    def url(self) -> str:
        return self.format.url or ""

    @property
    def itag(self) -> int | None:
        return self.format.itag


def candidates_for(
    formats: Sequence[RawFormat],
    rules: Sequence[FormatFamilyRule] = AUDIO_FAMILY_PRIORITY,
) -> tuple[list[RawFormat], AudioFamily | None]:
    """Return the formats matched by the first rule that matches anything."""
    for rule in rules:
        matched = [f for f in formats if rule.matches(f.itag, f.container)]
        if matched:
            return matched, rule.family
    return [], None


def pick_highest_audio(candidates: Sequence[RawFormat]) -> RawFormat | None:
    """Highest audio bitrate, preferring audio-only streams.

    Falls back to any stream with audio when no audio-only stream exists.
    ``sorted`` is stable, so equal bitrates keep the backend's order.
    """
    ranked = sorted(candidates, key=lambda f: f.audio_bitrate or 0, reverse=True)
    for fmt in ranked:
        if fmt.is_audio_only:
            return fmt
    for fmt in ranked:
        if fmt.has_audio:
            return fmt
    return None


def select_best_audio(
    formats: Sequence[RawFormat],
    rules: Sequence[FormatFamilyRule] = AUDIO_FAMILY_PRIORITY,
) -> SelectedAudio | None:
    """Pick the stream to play, or None when nothing playable exists.

    The family priority is absolute: once a family has candidates, a
    later family is never considered even if it carries a higher bitrate.
    """
    candidates, family = candidates_for(formats, rules)
    if family is None:
        return None

    chosen = pick_highest_audio(candidates)
    if chosen is None or not chosen.url:
        return None
    return SelectedAudio(format=chosen, family=family)
