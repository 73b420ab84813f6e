"""
Voting Domain Value Objects

Immutable value objects for the voting bounded context.
"""

from enum import Enum


class VoteResult(Enum):
    """Results of attempting to skip.

    These results indicate what happened when a user asked to skip.
    """

    # Skip executed
    THRESHOLD_MET = "threshold_met"  # Vote reached quorum
    AUTO_SKIP = "auto_skip"  # Small audience, no vote needed
    FORCED = "forced"  # Privileged skip

    # Skip deferred or ignored
    VOTE_RECORDED = "vote_recorded"  # Vote counted, quorum not reached
    ALREADY_VOTED = "already_voted"  # Repeat voter
    NOTHING_TO_SKIP = "nothing_to_skip"  # Queue too short

    @property
    def is_success(self) -> bool:
        """Check if this result indicates a successful outcome."""
        return self != VoteResult.ALREADY_VOTED

    @property
    def action_executed(self) -> bool:
        """Check if the player's skip was invoked."""
        return self in {
            VoteResult.THRESHOLD_MET,
            VoteResult.AUTO_SKIP,
            VoteResult.FORCED,
        }

    def get_message(self, votes: int = 0, members: int = 0) -> str:
        """Get a user-friendly message for this result.

        Args:
            votes: Current vote count.
            members: Members present in the voice channel.

        Returns:
            User-friendly message string.
        """
        messages = {
            VoteResult.THRESHOLD_MET: "Vote threshold met! Track skipped.",
            VoteResult.AUTO_SKIP: "Track skipped.",
            VoteResult.FORCED: "Track force-skipped.",
            VoteResult.VOTE_RECORDED: f"Vote recorded! ({votes}/{members} listeners voted to skip)",
            VoteResult.ALREADY_VOTED: "You've already voted!",
            VoteResult.NOTHING_TO_SKIP: "There is nothing to skip to.",
        }
        return messages.get(self, "Unknown vote result.")
