import os

NEUTRAL_BG = "#fdfcfb"
CARD_BG = "#ffffff"
ACCENT_DARK = "#1a1f36"
ACCENT_VIOLET = "#8b5cf6"
TIME_COLOR = "#1a1f36"
TIME_WARNING_COLOR = "#ef4444"
TIME_GAIN_COLOR = "#10b981"
TEXT_PRIMARY = "#1a1f36"
TEXT_MUTED = "#6a7090"
TROPHY_COLOR = "#facc15"

LOG_LEVEL = os.environ.get("COLOR_SENSE_LOG_LEVEL", "INFO").upper()

# Grid and clock
GRID_SIZE = 5
START_TIME = 15
MAX_TIME = 15
TICK_INTERVAL = 1.0
TIME_WARNING_THRESHOLD = 5

# Scoring
HIT_SCORE = 1
HIT_TIME_BONUS = 2
MISS_TIME_PENALTY = 3
LEVEL_STEP = 5

# Color generation
HUE_RANGE = (0, 360)
SATURATION_RANGE = (50, 80)
LIGHTNESS_RANGE = (40, 60)
MAX_DIFF = 15
MIN_DIFF = 1
DIFF_STEP = 3
CHANNEL_PIVOT = 50

# Feedback cues (seconds)
PARTICLE_LIFETIME = 1.0
TIME_FEEDBACK_LIFETIME = 1.0
SHAKE_DURATION = 0.5
BURST_SIZE = 8
CLICK_BURST_SIZE = 1
PARTICLE_SPREAD = 100.0

PARTICLE_COLORS = {
    "correct": "#10b981",
    "wrong": "#ef4444",
    "click": "#ffffff",
}

CRITIQUES = [
    (
        10,
        "Your color perception is still budding. Simultaneous contrast fools you easily; "
        "start with broad color studies and train warm/cool judgement.",
    ),
    (
        20,
        "Your sensitivity is taking shape. Hue separation is solid, but subtle shifts at "
        "extreme lightness still slip past you. Study complementary light and shadow.",
    ),
    (
        35,
        "Excellent work! You pick out very low-contrast differences at the level of a "
        "trained art student. That precision pays off in complex compositions.",
    ),
    (
        None,
        "Remarkable eye! Your command of micro color shifts is past the professional "
        "threshold and into master territory.",
    ),
]
