"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from music_coordinator.application.interfaces.cache_store import CacheStore
from music_coordinator.application.interfaces.media_backend import MediaBackend
from music_coordinator.application.interfaces.permissions import PermissionChecker
from music_coordinator.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "CacheStore",
    "MediaBackend",
    "PermissionChecker",
    "VoiceAdapter",
]
