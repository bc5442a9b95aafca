from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

__version__ = '1.0.0'

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, track_provider=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Lobby services live on the app so tests get a fresh registry per app
    from beatdle.services.lobbies import LobbyBroadcaster, LobbyCoordinator, LobbyRegistry
    from beatdle.services.tracks import SpotifyClient
    from beatdle.services.lobbies.coordinator import DEFAULT_MAX_PLAYERS

    if track_provider is None:
        track_provider = SpotifyClient.from_config(flask_app.config, logger=flask_app.logger)
    namespace = flask_app.config.get('WS_NAMESPACE', '/ws')
    registry = LobbyRegistry(max_rounds=int(flask_app.config.get('MAX_ROUNDS', 5)))
    broadcaster = LobbyBroadcaster(socketio, namespace=namespace, logger=flask_app.logger)
    coordinator = LobbyCoordinator(
        registry,
        broadcaster,
        track_provider,
        max_players=int(flask_app.config.get('MAX_PLAYERS', DEFAULT_MAX_PLAYERS)),
        logger=flask_app.logger,
    )
    flask_app.extensions['beatdle'] = {
        'registry': registry,
        'broadcaster': broadcaster,
        'coordinator': coordinator,
        'track_provider': track_provider,
        'sessions': {},
    }

    # Import and register blueprints here
    from beatdle.main import main
    flask_app.register_blueprint(main)

    from beatdle.api.spotify import spotify
    flask_app.register_blueprint(spotify, url_prefix='/api/spotify')

    from beatdle.api.users import users, leaderboard
    flask_app.register_blueprint(users, url_prefix='/api/users')
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    # Register Socket.IO event handlers
    from beatdle.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from beatdle.models import User
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed a few leaderboard rows
            seed = [('testuser1', 12, 7, 3), ('testuser2', 9, 9, 0), ('testuser3', 4, 2, 4)]
            for username, played, won, streak in seed:
                db.session.add(User(
                    username=username,
                    games_played=played,
                    games_won=won,
                    current_streak=streak,
                    max_streak=max(streak, won // 2),
                ))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
