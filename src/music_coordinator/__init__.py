"""Per-guild music playback coordination: resolve, queue, play, vote-skip."""

__version__ = "1.0.0"
