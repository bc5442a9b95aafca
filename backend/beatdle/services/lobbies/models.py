import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from beatdle.constants import GUESS_CORRECT, GUESS_WRONG, MAX_ATTEMPTS, MAX_ROUNDS
from beatdle.services.tracks.records import TrackRecord


class LobbyState(str, Enum):
    WAITING = 'waiting'
    IN_ROUND = 'in_round'
    ROUND_COMPLETE = 'round_complete'
    GAME_OVER = 'game_over'


def generate_player_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Player:
    name: str
    is_host: bool = False
    id: str = field(default_factory=generate_player_id)
    score: int = 0
    current_attempt: int = 0
    is_correct: bool = False
    guesses: List[str] = field(default_factory=list)

    @property
    def is_done(self) -> bool:
        return self.is_correct or self.current_attempt >= MAX_ATTEMPTS

    def record_guess(self, correct: bool) -> None:
        self.guesses.append(GUESS_CORRECT if correct else GUESS_WRONG)
        self.current_attempt = len(self.guesses)
        if correct:
            self.is_correct = True

    def reset_round(self) -> None:
        self.current_attempt = 0
        self.is_correct = False
        self.guesses = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'isHost': self.is_host,
            'currentAttempt': self.current_attempt,
            'isCorrect': self.is_correct,
            'guesses': list(self.guesses),
        }


@dataclass(eq=False)
class Lobby:
    id: str
    max_rounds: int = MAX_ROUNDS
    round: int = 0
    players: List[Player] = field(default_factory=list)
    connections: Set[str] = field(default_factory=set)
    current_track: Optional[TrackRecord] = None
    used_track_ids: List[str] = field(default_factory=list)
    # Serializes mutations when Socket.IO handlers run on several threads
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def find_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def all_players_done(self) -> bool:
        return all(p.is_done for p in self.players)

    def ensure_host(self) -> None:
        """Promote the earliest remaining player when nobody holds host."""
        if self.players and not any(p.is_host for p in self.players):
            self.players[0].is_host = True

    def winners(self) -> List[Player]:
        if not self.players:
            return []
        top = max(p.score for p in self.players)
        return [p for p in self.players if p.score == top]

    @property
    def state(self) -> LobbyState:
        if self.round > self.max_rounds:
            return LobbyState.GAME_OVER
        if self.round == 0:
            return LobbyState.WAITING
        done = self.all_players_done()
        if done and self.round >= self.max_rounds:
            return LobbyState.GAME_OVER
        if done:
            return LobbyState.ROUND_COMPLETE
        return LobbyState.IN_ROUND

    def players_payload(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.players]
