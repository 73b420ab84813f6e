"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types used across bounded contexts are defined here once,
so models can simply annotate their fields::

    from music_coordinator.domain.shared.types import DiscordSnowflake, NonEmptyStr

    class MyModel(BaseModel):
        guild_id: DiscordSnowflake
        title: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumeScalar = Annotated[float, Field(ge=0.0)]
"""Volume multiplier handed to the player (100 % == 2.0)."""

# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[int, Field(ge=0)]
"""Track duration in seconds."""

EpochSeconds = Annotated[int, Field(ge=0)]
"""Absolute UNIX timestamp in seconds."""
