from typing import Dict

from flask import current_app, request

from beatdle import socketio
from beatdle.errors import LobbyFullError, MessageError
from beatdle.services.lobbies.messages import (
    JoinLobby, NextSong, PlayerGuess, StartGame, UnknownCommand,
    error_event, parse_command,
)


def _services():
    return current_app.extensions['beatdle']


def _sessions() -> Dict[str, Dict[str, str]]:
    """sid -> {'lobby_id', 'player_id'} for connections bound to a lobby."""
    return _services()['sessions']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    ctx = _sessions().pop(sid, None)
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason} bound={bool(ctx)}")
    if not ctx:
        return
    try:
        _services()['coordinator'].leave(ctx['lobby_id'], ctx['player_id'], sid)
    except Exception:
        current_app.logger.exception(f"[disconnect-fail] sid={sid} lobby={ctx['lobby_id']}")


def handle_message(data):
    sid = _get_sid()
    try:
        command = parse_command(data)
    except UnknownCommand as exc:
        current_app.logger.warning(f"[message-unknown] sid={sid} type={exc.tag!r}")
        return
    except MessageError as exc:
        current_app.logger.warning(f"[message-dropped] sid={sid} reason={exc}")
        return

    try:
        _dispatch(command, sid)
    except Exception:
        # One bad command must not take down the connection or other lobbies
        current_app.logger.exception(f"[message-fail] sid={sid} command={command!r}")


def _dispatch(command, sid: str) -> None:
    coordinator = _services()['coordinator']
    if isinstance(command, JoinLobby):
        _join_lobby(command, sid)
    elif isinstance(command, StartGame):
        coordinator.start_game(command.lobby_id)
    elif isinstance(command, PlayerGuess):
        coordinator.submit_guess(command.lobby_id, command.player_id, command.correct)
    elif isinstance(command, NextSong):
        coordinator.advance_round(command.lobby_id)
    else:
        raise TypeError(f'unhandled command {command!r}')


def _join_lobby(command: JoinLobby, sid: str) -> None:
    services = _services()
    coordinator = services['coordinator']
    sessions = _sessions()

    # A connection belongs to at most one lobby at a time
    previous = sessions.pop(sid, None)
    if previous:
        if previous['lobby_id'] == command.lobby_id and coordinator.rejoin(
                previous['lobby_id'], previous['player_id'], sid):
            sessions[sid] = previous
            return
        coordinator.leave(previous['lobby_id'], previous['player_id'], sid)

    try:
        player_id = coordinator.join(command.lobby_id, command.name, command.is_host, sid)
    except LobbyFullError as exc:
        services['broadcaster'].send(sid, error_event(str(exc)))
        services['broadcaster'].close(sid)
        return
    sessions[sid] = {'lobby_id': command.lobby_id, 'player_id': player_id}


def handle_error(exc):
    current_app.logger.error(f"[socket-error] sid={getattr(request, 'sid', None)} error={exc!r}")


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on the lobby namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
    socketio.on_error_default(handle_error)
