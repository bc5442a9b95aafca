import threading
from typing import Dict, Optional

from beatdle.constants import MAX_ROUNDS
from .models import Lobby


class LobbyRegistry:
    """In-memory map of lobby code -> Lobby.

    Lobbies are created lazily on first join and dropped by the coordinator
    when their last connection goes away. Nothing survives a restart.
    """

    def __init__(self, max_rounds: int = MAX_ROUNDS):
        self.max_rounds = max_rounds
        self._lobbies: Dict[str, Lobby] = {}
        self._lock = threading.Lock()

    def get_or_create(self, lobby_id: str) -> Lobby:
        with self._lock:
            lobby = self._lobbies.get(lobby_id)
            if lobby is None:
                lobby = Lobby(id=lobby_id, max_rounds=self.max_rounds)
                self._lobbies[lobby_id] = lobby
            return lobby

    def get(self, lobby_id: str) -> Optional[Lobby]:
        return self._lobbies.get(lobby_id)

    def delete(self, lobby_id: str) -> None:
        with self._lock:
            self._lobbies.pop(lobby_id, None)

    def __contains__(self, lobby_id: str) -> bool:
        return lobby_id in self._lobbies

    def __len__(self) -> int:
        return len(self._lobbies)
