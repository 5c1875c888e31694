"""Constants for tmplsync."""

# Project layout
PROJECT_DIR_NAME = ".tmplsync"
CONFIG_FILE = "config.toml"
STATE_DIR = "state"

# HTTP timeout for non-streaming API calls (seconds)
HTTP_TIMEOUT = 30.0

# Log streams stay open for the whole import job, so reads never time out
STREAM_READ_TIMEOUT = None

# Stream reconnects before giving up on an import job
MAX_JOB_RETRIES = 3

# Upper bound for an uploaded template bundle (bytes)
TEMPLATE_ARCHIVE_LIMIT = 1 << 20

SESSION_TOKEN_HEADER = "Coder-Session-Token"
DEFAULT_TOKEN_ENV = "CODER_SESSION_TOKEN"
