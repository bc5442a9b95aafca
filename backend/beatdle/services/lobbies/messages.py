"""Tagged messages exchanged with lobby clients.

Inbound frames look like ``{"type": "joinLobby", "payload": {...}}`` and are
decoded into one of the command classes below. Outbound events use the same
envelope and always carry a full snapshot of the state they describe.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Union

from beatdle.errors import MessageError

# Outbound event types
JOINED_LOBBY = 'joinedLobby'
UPDATE_PLAYERS = 'updatePlayers'
START_ROUND = 'startRound'
ROUND_OVER = 'roundOver'
GAME_OVER = 'gameOver'
ERROR = 'error'


@dataclass(frozen=True)
class JoinLobby:
    lobby_id: str
    name: str
    is_host: bool = False


@dataclass(frozen=True)
class StartGame:
    lobby_id: str


@dataclass(frozen=True)
class PlayerGuess:
    lobby_id: str
    player_id: str
    correct: bool


@dataclass(frozen=True)
class NextSong:
    lobby_id: str


Command = Union[JoinLobby, StartGame, PlayerGuess, NextSong]


class UnknownCommand(MessageError):
    def __init__(self, tag: Any):
        super().__init__(f'unknown message type: {tag!r}')
        self.tag = tag


def _lobby_id(payload: Dict[str, Any]) -> str:
    lobby_id = payload.get('lobbyId')
    if not isinstance(lobby_id, str) or not lobby_id.strip():
        raise MessageError('lobbyId is required')
    return lobby_id.strip().upper()


def _parse_join(payload):
    name = payload.get('name')
    if not isinstance(name, str):
        raise MessageError('name is required')
    return JoinLobby(lobby_id=_lobby_id(payload), name=name, is_host=bool(payload.get('isHost')))


def _parse_guess(payload):
    player_id = payload.get('playerId')
    if not isinstance(player_id, str) or not player_id:
        raise MessageError('playerId is required')
    correct = payload.get('correct')
    if not isinstance(correct, bool):
        raise MessageError('correct must be a boolean')
    return PlayerGuess(lobby_id=_lobby_id(payload), player_id=player_id, correct=correct)


_PARSERS = {
    'joinLobby': _parse_join,
    'startGame': lambda payload: StartGame(lobby_id=_lobby_id(payload)),
    'playerGuess': _parse_guess,
    'nextSong': lambda payload: NextSong(lobby_id=_lobby_id(payload)),
}


def parse_command(raw: Union[str, bytes, Dict[str, Any]]) -> Command:
    """Decode an inbound frame into a command.

    Raises MessageError for frames that are not valid tagged JSON and
    UnknownCommand for well-formed frames with an unrecognized tag.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MessageError(f'invalid JSON: {exc}') from exc
    if not isinstance(raw, dict):
        raise MessageError('message must be an object')
    tag = raw.get('type')
    payload = raw.get('payload')
    if not isinstance(payload, dict):
        raise MessageError('payload must be an object')
    if not isinstance(tag, str):
        raise MessageError('type must be a string')
    parser = _PARSERS.get(tag)
    if parser is None:
        raise UnknownCommand(tag)
    return parser(payload)


def make_event(event_type: str, **payload: Any) -> Dict[str, Any]:
    return {'type': event_type, 'payload': payload}


def error_event(message: str) -> Dict[str, Any]:
    return make_event(ERROR, message=message)


def players_event(players: List[Dict[str, Any]], event_type: str = UPDATE_PLAYERS) -> Dict[str, Any]:
    return make_event(event_type, players=players)

