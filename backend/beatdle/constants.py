MAX_ATTEMPTS = 5
MAX_ROUNDS = 5
# Seconds of audio unlocked at attempt N (1-based)
SNIPPET_DURATIONS = (3, 6, 9, 12, 15)
ROUND_TIME_SECONDS = 90
# Points for guessing correctly at attempt N (1-based)
SCORE_POINTS = (5, 4, 3, 2, 1)

GUESS_CORRECT = 'correct'
GUESS_WRONG = 'wrong'
