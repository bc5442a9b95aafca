"""Lobby domain services: registry, round coordinator and broadcaster.

Socket handlers decode client frames and call into the coordinator;
nothing in this package knows about Flask request handling.
"""

from .broadcaster import LobbyBroadcaster
from .coordinator import LobbyCoordinator
from .models import Lobby, LobbyState, Player
from .registry import LobbyRegistry

__all__ = [
    'Lobby',
    'LobbyBroadcaster',
    'LobbyCoordinator',
    'LobbyRegistry',
    'LobbyState',
    'Player',
]
