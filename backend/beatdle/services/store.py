"""Read side of the user/leaderboard store."""

from typing import List, Optional

from beatdle import db
from beatdle.models import User

MAX_LEADERBOARD_LIMIT = 100


def get_user(user_id: int) -> Optional[User]:
    return db.session.get(User, user_id)


def list_top_leaderboard(limit: int = 10) -> List[User]:
    """Top users by max streak, ties broken by games won."""
    limit = max(1, min(int(limit), MAX_LEADERBOARD_LIMIT))
    return (
        User.query
        .order_by(User.max_streak.desc(), User.games_won.desc(), User.user_id.asc())
        .limit(limit)
        .all()
    )
