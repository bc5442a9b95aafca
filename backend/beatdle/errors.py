class BeatdleError(Exception):
    """Base class for errors raised by the game server."""


class LobbyFullError(BeatdleError):
    def __init__(self, lobby_id: str, max_players: int):
        super().__init__(f'Lobby is full (max {max_players} players)')
        self.lobby_id = lobby_id
        self.max_players = max_players


class TrackProviderError(BeatdleError):
    """The track provider could not produce a usable track."""


class TrackNotFoundError(TrackProviderError):
    pass


class MessageError(BeatdleError):
    """An inbound client frame could not be decoded into a command."""
