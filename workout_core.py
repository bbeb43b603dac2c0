import os
import json
from datetime import datetime

from flask import request, has_request_context

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_FILE = os.environ.get("WORKOUT_LOG_FILE", os.path.join(BASE_DIR, "logs.jsonl"))

# ───────────── Environment Config ─────────────
DATA_DIR = os.environ.get("WORKOUT_DATA_DIR", os.path.join(BASE_DIR, "workout_app", "data"))
VIDEO_BASE_URL = os.environ.get("WORKOUT_VIDEO_BASE", "https://bigdoodr.github.io/")
CACHE_DIR = os.environ.get(
    "WORKOUT_CACHE_DIR",
    os.path.join(os.path.expanduser("~"), ".cache", "WorkoutVideos"),
)

# Companion (wrist device) service, empty disables mirroring
COMPANION_BASE = os.environ.get("COMPANION_BASE", "")
COMPANION_TIMEOUT = float(os.environ.get("COMPANION_TIMEOUT", "1.5"))


def log_action(action, details=None, log_file=None):
    """Append a single log entry to logs.jsonl."""
    entry = {
        "timestamp": datetime.now().strftime("%d/%m/%Y %H:%M"),
        "action": action,
        "details": details or {},
    }
    if has_request_context():
        entry["ip"] = request.remote_addr
        entry["path"] = request.path
        entry["user_agent"] = request.headers.get("User-Agent", "")

    try:
        with open(log_file or LOG_FILE, "a") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError:
        # Don't break the app if logging fails
        pass


def load_logs(log_file=None, limit=200):
    """Load the last `limit` log entries, newest first."""
    path = log_file or LOG_FILE
    if not os.path.exists(path):
        return []

    try:
        with open(path, "r") as f:
            lines = f.readlines()
    except OSError:
        return []

    entries = []
    for line in lines[-limit:]:
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError:
            continue

    entries.reverse()  # newest first
    return entries
