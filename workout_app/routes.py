import json
import os

from flask import Response, abort, current_app, jsonify, request, send_from_directory

from . import workout_bp
from .defaults import DIFFICULTIES
from .feedback import FeedbackEvent, render_tone
from .generate import MAX_DURATION, MAX_REST_EVERY, MAX_TOTAL_MINUTES
from .player import COMMANDS
from .storage import load_workout_logs
from .transfer import RoutineFormatError
from .video import VideoMode

from workout_core import load_logs, log_action


def _ext():
    return current_app.extensions["workout"]


def _service():
    return _ext()["service"]


def _payload():
    try:
        data = request.get_json(force=True, silent=True)
    except Exception:
        data = None
    if data is None:
        data = request.form.to_dict(flat=True)
        if "focus_areas" in request.form:
            data["focus_areas"] = request.form.getlist("focus_areas")
    return data or {}


def _int_param(data, key, default):
    value = data.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{key} must be a whole number")


def _focus_list(value, catalog):
    if isinstance(value, str):
        value = [value]
    return [a for a in value or [] if a in catalog.focus_areas]


def _error(message, status=400, **extra):
    body = {"ok": False, "error": message}
    body.update(extra)
    return jsonify(body), status


# ───────── Catalog ─────────

@workout_bp.route("/catalog", methods=["GET"])
def catalog():
    service = _service()
    area = request.args.get("area", "All")
    difficulty = request.args.get("difficulty", "All")

    rows = []
    for row in service.catalog.browse(area, difficulty):
        ex = row["exercise"]
        rows.append({
            "focus_area": row["focus_area"],
            "difficulty": row["difficulty"],
            "name": ex.name,
            "has_video": service.video.playable_url(ex.video_path) is not None,
        })

    log_action("workout_catalog_view", {"area": area, "difficulty": difficulty})
    return jsonify({
        "areas": ["All"] + sorted(service.catalog.focus_areas),
        "difficulties": ["All"] + DIFFICULTIES,
        "exercises": rows,
    })


@workout_bp.route("/catalog/<path:name>/video", methods=["GET"])
def catalog_video(name):
    service = _service()
    ex = service.catalog.find(name)
    url = service.video.playable_url(ex.video_path) if ex else None
    if not url:
        return _error("no_video", 404)
    log_action("workout_catalog_video", {"name": name})
    return jsonify({"ok": True, "name": name, "url": url, "muted": True})


# ───────── Settings ─────────

BOOL_SETTINGS = ("did_prompt_for_video_mode", "stream_on_cache_miss", "enable_sound", "enable_haptics")
INT_SETTINGS = {
    "total_minutes": (1, MAX_TOTAL_MINUTES),
    "exercise_duration": (1, MAX_DURATION),
    "rest_duration": (0, MAX_DURATION),
    "rest_every": (1, MAX_REST_EVERY),
}


@workout_bp.route("/settings", methods=["GET", "POST"])
def settings():
    service = _service()
    if request.method == "GET":
        return jsonify(service.settings)

    data = _payload()
    changes = {}

    if "video_mode" in data:
        mode = data.get("video_mode")
        if mode not in [m.value for m in VideoMode]:
            return _error("invalid_video_mode")
        changes["video_mode"] = mode
        changes["did_prompt_for_video_mode"] = True

    for key in BOOL_SETTINGS:
        if key in data:
            val = data[key]
            changes[key] = val if isinstance(val, bool) else str(val).lower() in ("1", "true", "on", "yes")

    try:
        for key, (low, high) in INT_SETTINGS.items():
            if key in data:
                value = _int_param(data, key, None)
                if not low <= value <= high:
                    raise ValueError(f"{key} must be between {low} and {high}")
                changes[key] = value
    except ValueError as e:
        return _error(str(e))

    if "difficulty" in data:
        if data["difficulty"] not in DIFFICULTIES:
            return _error("invalid_difficulty")
        changes["difficulty"] = data["difficulty"]

    if "focus_areas" in data:
        changes["focus_areas"] = _focus_list(data["focus_areas"], service.catalog)

    service.update_settings(changes)
    log_action("workout_settings_updated", changes)
    return jsonify(service.settings)


# ───────── Routine ─────────

@workout_bp.route("/generate", methods=["POST"])
def generate():
    service = _service()
    data = _payload()
    defaults = service.settings

    focus_areas = _focus_list(data.get("focus_areas", defaults["focus_areas"]), service.catalog)

    difficulty = data.get("difficulty", defaults["difficulty"])
    if difficulty not in DIFFICULTIES:
        difficulty = DIFFICULTIES[0]

    try:
        total_minutes = _int_param(data, "total_minutes", defaults["total_minutes"])
        exercise_duration = _int_param(data, "exercise_duration", defaults["exercise_duration"])
        rest_duration = _int_param(data, "rest_duration", defaults["rest_duration"])
        rest_every = _int_param(data, "rest_every", defaults["rest_every"])
        routine = service.generate(
            focus_areas, difficulty, total_minutes, exercise_duration, rest_duration, rest_every,
        )
    except ValueError as e:
        log_action("workout_generate_invalid", {"error": str(e)})
        return _error(str(e))

    log_action("workout_generated", {
        "focus_areas": focus_areas,
        "difficulty": difficulty,
        "count": len(routine),
    })
    view = service.routine_view()
    view["ok"] = True
    view["empty"] = not routine
    return jsonify(view)


@workout_bp.route("/routine", methods=["GET"])
def routine():
    return jsonify(_service().routine_view())


@workout_bp.route("/routine/export", methods=["GET"])
def routine_export():
    service = _service()
    log_action("workout_routine_export", {"count": len(service.routine)})
    return Response(
        json.dumps(service.export(), indent=2),
        mimetype="application/json",
        headers={"Content-Disposition": "attachment; filename=workout.json"},
    )


@workout_bp.route("/routine/import", methods=["POST"])
def routine_import():
    service = _service()
    upload = request.files.get("file")
    raw = upload.read() if upload else request.get_data()

    try:
        imported = service.import_document(raw)
    except RoutineFormatError as e:
        log_action("workout_routine_import_failed", {"error": str(e)})
        return _error("invalid_routine", detail=str(e))

    log_action("workout_routine_imported", {"count": len(imported.routine)})
    view = service.routine_view()
    view["ok"] = True
    return jsonify(view)


# ───────── Player ─────────

@workout_bp.route("/player", methods=["GET"])
def player():
    return jsonify(_service().player_view())


@workout_bp.route("/player/<command>", methods=["POST"])
def player_command(command):
    if command not in COMMANDS:
        abort(404)
    service = _service()
    service.command(command)
    log_action("workout_player_" + command)
    return jsonify({"ok": True, "queued": command})


@workout_bp.route("/player/cues", methods=["GET"])
def player_cues():
    after = request.args.get("after", 0, type=int)
    cues = _service().cues
    return jsonify({"cues": cues.since(after), "last_seq": cues.last_seq})


@workout_bp.route("/tones/<event>.wav", methods=["GET"])
def tone(event):
    try:
        event = FeedbackEvent(event)
    except ValueError:
        abort(404)
    return Response(render_tone(event), mimetype="audio/wav")


# ───────── Videos ─────────

@workout_bp.route("/videos/download", methods=["POST"])
def videos_download():
    service = _service()
    paths = service.catalog.video_paths()
    log_action("workout_videos_download", {"total": len(paths)})

    def completion():
        log_action("workout_videos_download_done", {"total": len(paths)})

    service.video.download_all(paths, completion=completion)
    return jsonify({"ok": True, "total": len(paths)})


@workout_bp.route("/videos/status", methods=["GET"])
def videos_status():
    return jsonify(_service().video.cache_status())


@workout_bp.route("/videos/cancel", methods=["POST"])
def videos_cancel():
    _service().video.cancel_all()
    log_action("workout_videos_cancel")
    return jsonify({"ok": True})


@workout_bp.route("/videos/cache/<path:name>", methods=["GET"])
def videos_cache(name):
    video = _service().video
    if not os.path.isdir(video.cache_dir):
        abort(404)
    return send_from_directory(video.cache_dir, name)


# ───────── History / companion ─────────

@workout_bp.route("/logs", methods=["GET"])
def workout_logs():
    service = _service()
    logs = load_workout_logs(service.log_path)
    log_action("workout_logs_view")
    return jsonify({"logs": logs})


@workout_bp.route("/actions", methods=["GET"])
def actions():
    limit = request.args.get("limit", 200, type=int)
    return jsonify({"actions": load_logs(limit=max(1, min(limit, 1000)))})


@workout_bp.route("/companion/status", methods=["GET"])
def companion_status():
    online, payload = _service().link.fetch_status()
    log_action("workout_companion_status", {"online": online})
    return jsonify({"online": online, "status": payload})
