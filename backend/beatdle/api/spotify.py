from flask import Blueprint, current_app, jsonify, request

from beatdle.errors import TrackNotFoundError, TrackProviderError

spotify = Blueprint('spotify', __name__)


def _provider():
    return current_app.extensions['beatdle']['track_provider']


@spotify.route('/track/<string:track_id>', methods=['GET'])
def get_track(track_id):
    try:
        track = _provider().resolve_track(track_id)
    except TrackNotFoundError:
        return jsonify({'error': 'Track not found'}), 404
    except TrackProviderError as exc:
        current_app.logger.error(f"[track] id={track_id} error={exc}")
        return jsonify({'error': 'Failed to fetch track from Spotify'}), 502
    return jsonify(track.to_dict())


@spotify.route('/search', methods=['GET'])
def search_tracks():
    query = (request.args.get('q') or '').strip()
    if not query:
        return jsonify({'error': 'Missing or empty search query'}), 400
    try:
        results = _provider().search(query, 5)
    except TrackProviderError as exc:
        current_app.logger.error(f"[search] q={query!r} error={exc}")
        return jsonify({'error': 'Failed to search tracks'}), 502
    return jsonify({'results': [r.to_dict() for r in results]})


@spotify.route('/daily-song', methods=['GET'])
def daily_song():
    try:
        track = _provider().resolve_daily_track()
    except TrackProviderError as exc:
        current_app.logger.error(f"[daily-song] error={exc}")
        return jsonify({'error': 'Failed to fetch daily song'}), 502
    return jsonify(track.to_dict())


@spotify.route('/random-track', methods=['GET'])
def random_track():
    try:
        track = _provider().resolve_random_track()
    except TrackProviderError as exc:
        current_app.logger.error(f"[random-track] error={exc}")
        return jsonify({'error': 'Failed to fetch random track'}), 502
    return jsonify(track.to_dict())
