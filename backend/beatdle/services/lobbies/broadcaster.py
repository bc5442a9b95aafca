import json
import logging
from typing import Any, Dict

# Socket.IO event name carrying every tagged message
MESSAGE_EVENT = 'message'


def room_for(lobby_id: str) -> str:
    return f"lobby:{lobby_id}"


class LobbyBroadcaster:
    """Fan-out of lobby events over Socket.IO rooms.

    Every lobby maps to the room ``lobby:<id>``; a connection is in the room
    while it is bound to the lobby. Events are serialized once and emitted to
    the room, so connections that already went away are skipped by the
    Socket.IO server. Delivery is best effort: no retry, no queueing.
    """

    def __init__(self, socketio, namespace: str = '/ws', logger=None):
        self.socketio = socketio
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)

    def join(self, lobby_id: str, connection: str) -> None:
        self.socketio.server.enter_room(connection, room_for(lobby_id), namespace=self.namespace)

    def leave(self, lobby_id: str, connection: str) -> None:
        self.socketio.server.leave_room(connection, room_for(lobby_id), namespace=self.namespace)

    def broadcast(self, lobby_id: str, event: Dict[str, Any]) -> None:
        try:
            self.socketio.emit(MESSAGE_EVENT, json.dumps(event), to=room_for(lobby_id), namespace=self.namespace)
        except Exception:
            self.logger.exception(f"[broadcast-fail] lobby={lobby_id} type={event.get('type')}")

    def send(self, connection: str, event: Dict[str, Any]) -> None:
        self.socketio.emit(MESSAGE_EVENT, json.dumps(event), to=connection, namespace=self.namespace)

    def close(self, connection: str) -> None:
        self.logger.info(f"[close] sid={connection}")
        self.socketio.server.disconnect(connection, namespace=self.namespace)
