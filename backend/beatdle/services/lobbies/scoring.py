from beatdle.constants import SCORE_POINTS, SNIPPET_DURATIONS
from .models import Player


def points_for_attempt(attempt: int) -> int:
    """Points for a correct guess on the given 1-based attempt; 0 if out of range."""
    if 1 <= attempt <= len(SCORE_POINTS):
        return SCORE_POINTS[attempt - 1]
    return 0


def snippet_duration(attempt: int) -> int:
    """Seconds of audio unlocked for the given 1-based attempt.

    Attempts past the schedule keep the longest snippet.
    """
    idx = min(max(attempt, 1), len(SNIPPET_DURATIONS)) - 1
    return SNIPPET_DURATIONS[idx]


def apply_guess(player: Player, correct: bool) -> bool:
    """Record a guess and award points for a correct one.

    Returns False without touching the player when it is already done for
    the round (stale or duplicate guess).
    """
    if player.is_done:
        return False
    player.record_guess(correct)
    if correct:
        player.score += points_for_attempt(player.current_attempt)
    return True
