"""
ShowTracker — per-profile watch-status tracking for shows, seasons, episodes
and movies.
"""

__version__ = "1.0.0"
