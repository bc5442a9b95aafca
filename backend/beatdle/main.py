from flask import Blueprint, current_app, jsonify

from beatdle import __version__
from beatdle.constants import MAX_ATTEMPTS, ROUND_TIME_SECONDS, SCORE_POINTS
from beatdle.services.lobbies.scoring import snippet_duration

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Beatdle API is running!', 'version': __version__})


@main.route('/api/rules')
def rules():
    """Game constants the clients render from."""
    cfg = current_app.config
    return jsonify({
        'maxAttempts': MAX_ATTEMPTS,
        'maxRounds': int(cfg.get('MAX_ROUNDS', 5)),
        'maxPlayers': int(cfg.get('MAX_PLAYERS', 8)),
        'snippetDurations': [snippet_duration(i) for i in range(1, MAX_ATTEMPTS + 1)],
        'scorePoints': list(SCORE_POINTS),
        'roundTimeSeconds': ROUND_TIME_SECONDS,
    })
