"""contrib-stats: per-author contribution statistics for GitHub organizations."""

__version__ = "0.1.0"
