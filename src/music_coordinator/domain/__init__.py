"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Exceptions, messages and constrained types
- music/: Stream metadata, queues, sessions and format selection
- voting/: Skip votes and quorum rules
"""

from music_coordinator.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
