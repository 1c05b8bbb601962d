"""Static quiz, timer and scoring settings shared by the server and the session engine."""

# Quiz defaults
DEFAULT_PASSING_SCORE = 60  # percentage
MIN_OPTIONS = 2

# Validation lengths
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
MIN_QUESTION_LENGTH = 3
MIN_QUIZ_TITLE_LENGTH = 3

# Timer & submission
LOW_TIME_WARNING_SECONDS = 300  # 5 minutes
AUTO_SUBMIT_DELAY_SECONDS = 2.0  # grace period between "time's up" and the real submission
TICK_INTERVAL_SECONDS = 1.0

# Timer progress levels, as percent of time remaining
TIMER_CRITICAL_THRESHOLD = 10
TIMER_WARNING_THRESHOLD = 25

# Analytics bands: (label, min, max) inclusive
SCORE_BANDS = (
    ("0-25%", 0, 25),
    ("26-50%", 26, 50),
    ("51-75%", 51, 75),
    ("76-100%", 76, 100),
)

# Correct answers are replaced by this value for anyone but an admin
REDACTED_ANSWER = -1

UNKNOWN_IP = "unknown"
