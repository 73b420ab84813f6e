"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Audio (yt-dlp media backend)
- Cache (in-memory and SQLite resolver cache stores)
- Discord (voice adapter and permission checker)
"""
