import os

APP_TITLE = "Pomodoro Blocker"
APPDATA_DIR = os.path.join(os.getenv("APPDATA") or os.path.expanduser("~"), "PomodoroBlocker")

LOG_NAME = "PomodoroBlocker"
LOG_DIR = os.path.join(APPDATA_DIR, "logs")
LOG_FILE = os.path.join(LOG_DIR, "pomodoro_blocker.log")

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
WORK_MINUTES_RANGE = (1, 120)
BREAK_MINUTES_RANGE = (1, 60)

TICK_INTERVAL_SEC = 1.0
ENFORCE_INTERVAL_SEC = 1.0

# Seconds per process
TERMINATE_WAIT_SEC = 0.5
KILL_WAIT_SEC = 0.25

UI_REFRESH_MS = 250

WINDOW_GEOMETRY = "560x520"
COMPACT_GEOMETRY = "260x120"

CHIME_NOTE_MS = 180
CHIME_VOLUME = 0.5
SAMPLE_RATE = 44100
WORK_TO_BREAK_NOTES = (1046.50, 784.00, 659.25, 523.25)
BREAK_TO_WORK_NOTES = (523.25, 659.25, 784.00, 1046.50)
