"""
Voting Domain Services

Domain services containing voting business logic.
"""

from music_coordinator.domain.voting.entities import VoteRecord
from music_coordinator.domain.voting.value_objects import VoteResult


class VotingDomainService:
    """Domain service for voting-related business rules.

    Encapsulates the skip protocol: when a vote is needed, how a vote is
    counted, and when quorum is reached.
    """

    # Configuration constants
    SKIP_QUORUM = 0.5
    SMALL_AUDIENCE_SIZE = 2  # If <= this many members, anyone can skip
    MIN_QUEUE_FOR_SKIP = 2  # Skipping needs something queued behind the current item

    @classmethod
    def has_something_to_skip(cls, queue_length: int) -> bool:
        return queue_length >= cls.MIN_QUEUE_FOR_SKIP

    @classmethod
    def requires_vote(
        cls, member_count: int, force: bool = False, small_audience_size: int | None = None
    ) -> bool:
        """Check if a skip must go through a vote.

        Args:
            member_count: Members in the voice channel, bot included.
            force: Whether the requester is privileged.
            small_audience_size: Override for ``SMALL_AUDIENCE_SIZE``.

        Returns:
            True if the skip is gated by quorum.
        """
        if force:
            return False
        limit = cls.SMALL_AUDIENCE_SIZE if small_audience_size is None else small_audience_size
        return member_count > limit

    @classmethod
    def is_quorum_met(
        cls, votes: VoteRecord, member_count: int, quorum: float | None = None
    ) -> bool:
        threshold = cls.SKIP_QUORUM if quorum is None else quorum
        return votes.fraction_of(member_count) >= threshold

    @classmethod
    def cast_vote(
        cls,
        votes: VoteRecord,
        user_id: int,
        member_count: int,
        quorum: float | None = None,
    ) -> VoteResult:
        """Record a vote and report whether the skip should now happen.

        The vote set is cleared when quorum is reached; the caller only has
        to execute the skip.

        Args:
            votes: The session's vote record, mutated in place.
            user_id: The ID of the user voting.
            member_count: Members in the voice channel.
            quorum: Override for ``SKIP_QUORUM``.

        Returns:
            ALREADY_VOTED, VOTE_RECORDED or THRESHOLD_MET.
        """
        if not votes.add_vote(user_id):
            return VoteResult.ALREADY_VOTED

        if not cls.is_quorum_met(votes, member_count, quorum):
            return VoteResult.VOTE_RECORDED

        votes.reset()
        return VoteResult.THRESHOLD_MET
