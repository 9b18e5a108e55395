"""Constants for wiggum."""

# Session-relative layout
WIGGUM_DIR = ".wiggum"
STATUS_FILE = "status.json"
SESSION_FILE = "session.json"
CONFIG_FILE = "config.toml"
ARCHIVE_DIR = "archive"

# Exit codes shared with the loop harness
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2

# Set to any non-empty value to keep `wiggum init` from opening the dashboard
NO_DASHBOARD_ENV = "WIGGUM_NO_DASHBOARD"

# Dashboard timing (seconds)
REFRESH_INTERVAL = 0.25
KEY_POLL_TIMEOUT = 0.05

# Subprocess timeouts (seconds)
GIT_TIMEOUT = 30
LAUNCH_TIMEOUT = 10
