"""Application services orchestrating the domain and infrastructure ports."""

from music_coordinator.application.services.coordinator import PlaybackCoordinator
from music_coordinator.application.services.queue_service import QueueService
from music_coordinator.application.services.resolver_service import ReferenceResolver
from music_coordinator.application.services.session_registry import SessionRegistry
from music_coordinator.application.services.skip_vote_service import SkipOutcome, SkipVoteService

__all__ = [
    "PlaybackCoordinator",
    "QueueService",
    "ReferenceResolver",
    "SessionRegistry",
    "SkipOutcome",
    "SkipVoteService",
]
