"""Core domain entities for the voting bounded context."""

from __future__ import annotations

from pydantic import BaseModel, Field

from music_coordinator.domain.shared.types import DiscordSnowflake


class VoteRecord(BaseModel):
    """Distinct voters for a cooperative skip in one session."""

    voters: set[DiscordSnowflake] = Field(default_factory=set)

    @property
    def vote_count(self) -> int:
        return len(self.voters)

    def has_voted(self, user_id: int) -> bool:
        return user_id in self.voters

    def add_vote(self, user_id: int) -> bool:
        """Add a vote. Returns False if the user had already voted."""
        if self.has_voted(user_id):
            return False
        self.voters.add(user_id)
        return True

    def fraction_of(self, member_count: int) -> float:
        if member_count <= 0:
            return 0.0
        return self.vote_count / member_count

    def reset(self) -> None:
        self.voters = set()
