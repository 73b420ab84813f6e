"""Skip-Vote Protocol - cooperative and forced skips."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonNegativeInt
from ...domain.voting.services import VotingDomainService
from ...domain.voting.value_objects import VoteResult

if TYPE_CHECKING:
    from ..interfaces.voice_adapter import VoiceAdapter
    from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)


class SkipOutcome(BaseModel):
    """Result of a skip request."""

    model_config = ConfigDict(frozen=True, strict=True)

    result: VoteResult
    message: str
    votes: NonNegativeInt = 0
    members: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.result.is_success

    @property
    def skipped(self) -> bool:
        return self.result.action_executed

    @classmethod
    def from_vote_result(cls, result: VoteResult, votes: int = 0, members: int = 0) -> SkipOutcome:
        return cls(
            result=result,
            message=result.get_message(votes, members),
            votes=votes,
            members=members,
        )


class SkipVoteService:
    """Gates non-privileged skips behind a majority of channel members."""

    def __init__(
        self,
        *,
        session_registry: SessionRegistry,
        voice_adapter: VoiceAdapter,
        skip_quorum: float = VotingDomainService.SKIP_QUORUM,
        small_audience_size: int = VotingDomainService.SMALL_AUDIENCE_SIZE,
    ) -> None:
        self._registry = session_registry
        self._voice = voice_adapter
        self._quorum = skip_quorum
        self._small_audience_size = small_audience_size

    async def skip(
        self,
        guild_id: DiscordSnowflake,
        requester_id: DiscordSnowflake,
        voice_channel_id: DiscordSnowflake,
        force: bool = False,
    ) -> SkipOutcome:
        """Skip the current item, or record a vote towards skipping it.

        Args:
            guild_id: The guild whose playback to skip.
            requester_id: The user asking to skip.
            voice_channel_id: The voice channel the requester is in.
            force: Bypass voting (privileged requester).

        Returns:
            NOTHING_TO_SKIP, ALREADY_VOTED or VOTE_RECORDED when the player
            was left alone; THRESHOLD_MET, AUTO_SKIP or FORCED after the
            player's skip was invoked.
        """
        session = self._registry.get_or_create(guild_id)

        async with session.lock:
            # The now-playing item is off the queue but still counts.
            queue_length = len(session.queue) + (1 if session.is_playing else 0)
            if not VotingDomainService.has_something_to_skip(queue_length):
                logger.debug(LogTemplates.NOTHING_TO_SKIP, guild_id, queue_length)
                return SkipOutcome.from_vote_result(VoteResult.NOTHING_TO_SKIP)

            members = len(self._voice.get_member_ids(voice_channel_id))

            if VotingDomainService.requires_vote(members, force, self._small_audience_size):
                result = VotingDomainService.cast_vote(
                    session.votes, requester_id, members, self._quorum
                )
                if result is not VoteResult.THRESHOLD_MET:
                    votes = session.votes.vote_count
                    if result is VoteResult.VOTE_RECORDED:
                        logger.info(LogTemplates.VOTE_RECORDED, votes, members, guild_id)
                    return SkipOutcome.from_vote_result(result, votes, members)
            else:
                result = VoteResult.FORCED if force else VoteResult.AUTO_SKIP
                session.votes.reset()

            await self._voice.skip(guild_id, voice_channel_id)

        logger.info(LogTemplates.SKIP_EXECUTED, guild_id, result.value)
        return SkipOutcome.from_vote_result(result, 0, members)
