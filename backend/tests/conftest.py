import json
import os
import sys
import pytest

# Ensure the backend root (containing the `beatdle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from beatdle import create_app, db, socketio
from beatdle.errors import TrackNotFoundError, TrackProviderError
from beatdle.services.lobbies import LobbyCoordinator, LobbyRegistry
from beatdle.services.tracks import TrackRecord, TrackSuggestion


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_PLAYERS = 3
    MAX_ROUNDS = 5
    WS_NAMESPACE = '/ws'
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:5173']


def make_track(track_id, name=None):
    return TrackRecord(
        id=track_id,
        name=name or f'Song {track_id}',
        artists=['Some Artist'],
        album_name='Some Album',
        image_url='https://img.example/a.jpg',
        preview_url=f'https://cdn.example/{track_id}.mp3',
        duration_ms=180000,
        release_date='2020-01-01',
    )


class FakeTrackProvider:
    """In-memory stand-in for the Spotify client."""

    def __init__(self):
        self.random_calls = []
        self.fail = False
        self.invalid = False
        self._counter = 0

    def resolve_random_track(self, exclude_ids=()):
        self.random_calls.append(list(exclude_ids))
        if self.fail:
            raise TrackProviderError('provider down')
        if self.invalid:
            return make_track(None)
        self._counter += 1
        return make_track(f'track{self._counter}')

    def resolve_track(self, track_id):
        if self.fail:
            raise TrackProviderError('provider down')
        if track_id == 'missing':
            raise TrackNotFoundError(track_id)
        return make_track(track_id)

    def search(self, query, limit=5):
        if self.fail:
            raise TrackProviderError('provider down')
        return [TrackSuggestion(id=f'{query}-{i}', name=f'{query} {i}', artists=['X']) for i in range(limit)]

    def resolve_daily_track(self, day=None):
        if self.fail:
            raise TrackProviderError('provider down')
        return make_track('daily')


class RecordingBroadcaster:
    """Broadcaster double that records events instead of emitting them."""

    namespace = '/ws'

    def __init__(self):
        self.events = []
        self.sent = []
        self.closed = []
        self.rooms = {}

    def broadcast(self, lobby_id, event):
        self.events.append((lobby_id, event))

    def send(self, connection, event):
        self.sent.append((connection, event))

    def join(self, lobby_id, connection):
        self.rooms.setdefault(lobby_id, set()).add(connection)

    def leave(self, lobby_id, connection):
        self.rooms.get(lobby_id, set()).discard(connection)

    def close(self, connection):
        self.closed.append(connection)

    def types(self):
        return [e['type'] for _, e in self.events]

    def last(self, event_type):
        for _, event in reversed(self.events):
            if event['type'] == event_type:
                return event
        return None


def decode_messages(received):
    """Decode the JSON payloads of received Socket.IO 'message' packets."""
    out = []
    for pkt in received:
        if pkt['name'] != 'message':
            continue
        data = pkt['args']
        if isinstance(data, list):
            data = data[0]
        out.append(json.loads(data) if isinstance(data, str) else data)
    return out


@pytest.fixture()
def track_provider():
    return FakeTrackProvider()


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def registry():
    return LobbyRegistry(max_rounds=5)


@pytest.fixture()
def coordinator(registry, broadcaster, track_provider):
    return LobbyCoordinator(registry, broadcaster, track_provider, max_players=3)


@pytest.fixture()
def flask_app(track_provider):
    application = create_app(TestConfig, track_provider=track_provider)
    with application.app_context():
        # Ensure models are imported so tables are created
        import beatdle.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Create Socket.IO test clients on /ws; all are disconnected at teardown."""
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace='/ws')
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass
