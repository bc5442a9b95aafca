"""Track provider: resolves Spotify track ids and queries to track records."""

from .records import TrackRecord, TrackSuggestion
from .spotify import SpotifyClient

__all__ = ['SpotifyClient', 'TrackRecord', 'TrackSuggestion']
