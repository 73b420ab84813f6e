"""
Voting Bounded Context

Domain logic for cooperative skip voting.
"""

from music_coordinator.domain.voting.entities import VoteRecord
from music_coordinator.domain.voting.services import VotingDomainService
from music_coordinator.domain.voting.value_objects import VoteResult

__all__ = [
    # Entities
    "VoteRecord",
    # Value Objects
    "VoteResult",
    # Services
    "VotingDomainService",
]
