from datetime import datetime, timezone

from beatdle import db


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = 'users'
    user_id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    games_won = db.Column(db.Integer, default=0, nullable=False)
    current_streak = db.Column(db.Integer, default=0, nullable=False)
    max_streak = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'username': self.username,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'games_played': self.games_played,
            'games_won': self.games_won,
            'current_streak': self.current_streak,
            'max_streak': self.max_streak,
        }

    def to_leaderboard_entry(self):
        return {
            'username': self.username,
            'max_streak': self.max_streak,
            'games_won': self.games_won,
        }
