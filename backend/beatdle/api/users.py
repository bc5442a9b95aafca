from flask import Blueprint, jsonify, request

from beatdle.services.store import get_user, list_top_leaderboard

users = Blueprint('users', __name__)
leaderboard = Blueprint('leaderboard', __name__)


@users.route('/<int:user_id>', methods=['GET'])
def get_user_profile(user_id):
    user = get_user(user_id)
    if user is None:
        return jsonify({'error': 'User not found'}), 404
    return jsonify(user.to_dict())


@leaderboard.route('', methods=['GET'])
@leaderboard.route('/', methods=['GET'])
def get_leaderboard():
    try:
        limit = int(request.args.get('limit', 10))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400
    return jsonify([u.to_leaderboard_entry() for u in list_top_leaderboard(limit)])
