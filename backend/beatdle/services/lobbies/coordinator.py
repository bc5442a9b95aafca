import logging
from typing import Optional

from beatdle.errors import LobbyFullError
from .broadcaster import LobbyBroadcaster
from .messages import (
    GAME_OVER, JOINED_LOBBY, ROUND_OVER, START_ROUND, UPDATE_PLAYERS,
    error_event, make_event, players_event,
)
from .models import Lobby, LobbyState, Player
from .registry import LobbyRegistry
from .scoring import apply_guess


DEFAULT_MAX_PLAYERS = 8


class LobbyCoordinator:
    """Round lifecycle for every lobby: join/leave, rounds, guesses, game over.

    Each mutation holds the lobby's lock and broadcasts a full snapshot of
    the affected state before releasing it. The track fetch in
    ``advance_round`` runs without the lock; its result is committed only if
    the lobby is still alive and no other advance won the race.
    """

    def __init__(self, registry: LobbyRegistry, broadcaster: LobbyBroadcaster, track_provider,
                 max_players: int = DEFAULT_MAX_PLAYERS, logger=None):
        self.registry = registry
        self.broadcaster = broadcaster
        self.track_provider = track_provider
        self.max_players = max_players
        self.logger = logger or logging.getLogger(__name__)

    def _broadcast_players(self, lobby: Lobby, event_type: str = UPDATE_PLAYERS) -> None:
        self.broadcaster.broadcast(lobby.id, players_event(lobby.players_payload(), event_type))

    def _broadcast_game_over(self, lobby: Lobby) -> None:
        winners = lobby.winners()
        self.logger.info(
            f"[game-over] lobby={lobby.id} round={lobby.round} winners={[w.name for w in winners]}"
        )
        self.broadcaster.broadcast(lobby.id, make_event(
            GAME_OVER,
            winners=[w.to_dict() for w in winners],
            players=lobby.players_payload(),
        ))

    def join(self, lobby_id: str, name: str, is_host: bool, connection: str) -> str:
        """Add a player bound to ``connection``; returns the new player id.

        Raises LobbyFullError when the lobby is at capacity.
        """
        while True:
            lobby = self.registry.get_or_create(lobby_id)
            with lobby.lock:
                if self.registry.get(lobby_id) is not lobby:
                    # Emptied and dropped by a concurrent leave; start over
                    continue
                if len(lobby.players) >= self.max_players:
                    if not lobby.connections:
                        self.registry.delete(lobby_id)
                    self.logger.info(f"[join-rejected] lobby={lobby_id} name={name!r} players={len(lobby.players)}")
                    raise LobbyFullError(lobby_id, self.max_players)

                if is_host and any(p.is_host for p in lobby.players):
                    is_host = False
                player = Player(name=name, is_host=is_host)
                lobby.players.append(player)
                lobby.connections.add(connection)
                self.broadcaster.join(lobby_id, connection)
                lobby.ensure_host()
                self.logger.info(
                    f"[join] lobby={lobby_id} player={player.id} name={name!r} host={player.is_host} "
                    f"players={len(lobby.players)}"
                )

                self.broadcaster.send(connection, make_event(
                    JOINED_LOBBY, yourId=player.id, players=lobby.players_payload(),
                ))
                self._broadcast_players(lobby)
                return player.id

    def rejoin(self, lobby_id: str, player_id: str, connection: str) -> bool:
        """Re-send ``joinedLobby`` to a connection already bound to ``player_id``.

        Returns False when the lobby or player is gone.
        """
        lobby = self.registry.get(lobby_id)
        if lobby is None:
            return False
        with lobby.lock:
            if lobby.find_player(player_id) is None or connection not in lobby.connections:
                return False
            self.logger.info(f"[rejoin] lobby={lobby_id} player={player_id}")
            self.broadcaster.send(connection, make_event(
                JOINED_LOBBY, yourId=player_id, players=lobby.players_payload(),
            ))
            return True

    def start_game(self, lobby_id: str) -> None:
        lobby = self.registry.get(lobby_id)
        if lobby is None:
            return
        with lobby.lock:
            state = lobby.state
            if state not in (LobbyState.WAITING, LobbyState.GAME_OVER):
                self.logger.info(f"[start-ignored] lobby={lobby_id} state={state.value} round={lobby.round}")
                return
            lobby.round = 0
            lobby.current_track = None
            lobby.used_track_ids = []
            for p in lobby.players:
                p.score = 0
                p.reset_round()
            self.logger.info(f"[start] lobby={lobby_id} players={len(lobby.players)} max_rounds={lobby.max_rounds}")
        self.advance_round(lobby_id)

    def advance_round(self, lobby_id: str) -> None:
        lobby = self.registry.get(lobby_id)
        if lobby is None:
            return

        with lobby.lock:
            base_round = lobby.round
            next_round = base_round + 1
            if next_round > lobby.max_rounds:
                lobby.round = next_round
                self._broadcast_game_over(lobby)
                return
            exclude = list(lobby.used_track_ids)

        try:
            track = self.track_provider.resolve_random_track(exclude)
        except Exception:
            self.logger.exception(f"[track-fail] lobby={lobby_id} round={next_round}")
            self.broadcaster.broadcast(lobby_id, error_event('Failed to load song'))
            return

        if track is None or not getattr(track, 'id', None):
            self.logger.error(f"[track-invalid] lobby={lobby_id} round={next_round} track={track!r}")
            self.broadcaster.broadcast(lobby_id, error_event('Fetched song data is invalid'))
            return

        with lobby.lock:
            if self.registry.get(lobby_id) is not lobby:
                self.logger.info(f"[round-abort] lobby={lobby_id} closed while fetching track")
                return
            if lobby.round != base_round:
                self.logger.info(
                    f"[round-abort] lobby={lobby_id} expected_round={base_round} actual_round={lobby.round}"
                )
                return
            lobby.round = next_round
            for p in lobby.players:
                p.reset_round()
            lobby.current_track = track
            lobby.used_track_ids.append(track.id)
            self.logger.info(f"[round-start] lobby={lobby_id} round={lobby.round} track={track.id}")
            self.broadcaster.broadcast(lobby_id, make_event(
                START_ROUND,
                track=track.to_dict(),
                players=lobby.players_payload(),
                round=lobby.round,
            ))

    def submit_guess(self, lobby_id: str, player_id: str, correct: bool) -> None:
        lobby = self.registry.get(lobby_id)
        if lobby is None:
            return
        with lobby.lock:
            player = lobby.find_player(player_id)
            if player is None:
                return
            if not apply_guess(player, correct):
                self.logger.debug(f"[guess-stale] lobby={lobby_id} player={player_id}")
                return
            self.logger.info(
                f"[guess] lobby={lobby_id} round={lobby.round} player={player_id} "
                f"attempt={player.current_attempt} correct={correct} score={player.score}"
            )

            if lobby.all_players_done():
                if lobby.round >= lobby.max_rounds:
                    self._broadcast_game_over(lobby)
                else:
                    self.logger.info(f"[round-over] lobby={lobby_id} round={lobby.round}")
                    self._broadcast_players(lobby, ROUND_OVER)
            self._broadcast_players(lobby)

    def leave(self, lobby_id: str, player_id: Optional[str], connection: str) -> None:
        lobby = self.registry.get(lobby_id)
        if lobby is None:
            return
        with lobby.lock:
            lobby.connections.discard(connection)
            self.broadcaster.leave(lobby_id, connection)
            lobby.players = [p for p in lobby.players if p.id != player_id]
            if not lobby.connections:
                self.registry.delete(lobby_id)
                self.logger.info(f"[lobby-closed] lobby={lobby_id}")
                return
            lobby.ensure_host()
            self.logger.info(f"[leave] lobby={lobby_id} player={player_id} players={len(lobby.players)}")
            self._broadcast_players(lobby)
