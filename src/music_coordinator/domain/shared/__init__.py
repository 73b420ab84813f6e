"""Shared kernel: exceptions, messages and constrained types."""

from music_coordinator.domain.shared.exceptions import DomainError, ValidationError

__all__ = [
    "DomainError",
    "ValidationError",
]
