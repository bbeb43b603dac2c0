import json
import logging
import os

from .defaults import DEFAULT_CATALOG, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

CATALOG_FILE = "catalog.json"
WORKOUT_LOG_FILE = "workout_logs.jsonl"
SETTINGS_FILE = "settings.json"


def data_paths(data_dir: str):
    """Return (catalog_path, log_path, settings_path) inside data_dir."""
    return tuple(os.path.join(data_dir, name) for name in (CATALOG_FILE, WORKOUT_LOG_FILE, SETTINGS_FILE))


def ensure_data_files(data_dir: str) -> str:
    """Create the data directory and seed any missing file from the defaults."""
    os.makedirs(data_dir, exist_ok=True)
    catalog_path, workout_log_path, settings_path = data_paths(data_dir)

    for path, seed in ((catalog_path, DEFAULT_CATALOG), (settings_path, DEFAULT_SETTINGS)):
        if not os.path.exists(path):
            logger.info("seeding %s", path)
            save_json(path, seed)

    if not os.path.exists(workout_log_path):
        # history is JSON lines, appended one workout at a time
        open(workout_log_path, "a").close()

    return data_dir


def load_json(path: str, fallback):
    try:
        with open(path, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        return fallback
    except (OSError, ValueError) as e:
        logger.warning("unreadable %s, using defaults: %s", path, e)
        return fallback


def save_json(path: str, data):
    """Write `data` next to `path` first so readers never see half a file."""
    tmp_path = path + ".tmp"
    with open(tmp_path, "w") as f:
        json.dump(data, f, indent=2)
    os.replace(tmp_path, path)


def append_workout_log(path: str, entry: dict):
    line = json.dumps(entry)
    try:
        with open(path, "a") as f:
            f.write(line + "\n")
    except OSError as e:
        logger.error("could not record workout in %s: %s", path, e)


def load_workout_logs(path: str):
    """Read every workout log entry, newest first. Broken lines are skipped."""
    logs = []
    if not os.path.exists(path):
        return logs
    try:
        with open(path, "r") as f:
            for line in f:
                if not line.strip():
                    continue
                try:
                    logs.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError as e:
        logger.warning("could not read workout history %s: %s", path, e)

    logs.sort(key=lambda x: x.get("started_at") or "", reverse=True)
    return logs


def load_settings(path: str):
    data = load_json(path, {})
    if not isinstance(data, dict):
        data = {}
    for key, val in DEFAULT_SETTINGS.items():
        data.setdefault(key, list(val) if isinstance(val, list) else val)
    return data


def save_settings(path: str, settings: dict):
    save_json(path, settings)
