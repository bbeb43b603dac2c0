#!/usr/bin/env python3
import os
import atexit
import logging
import sys

from flask import Flask, jsonify, url_for

import workout_core
from workout_app import workout_bp
from workout_app.catalog import Catalog
from workout_app.companion import CompanionLink
from workout_app.service import WorkoutService
from workout_app.storage import data_paths, ensure_data_files
from workout_app.video import VideoManager

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)


def create_app(test_config=None):
    """Build the phone app and the services it owns."""
    app = Flask(__name__)

    # ───────────── Config ─────────────
    app.config.update(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "change-me-to-something-random"),
        DATA_DIR=workout_core.DATA_DIR,
        VIDEO_BASE_URL=workout_core.VIDEO_BASE_URL,
        CACHE_DIR=workout_core.CACHE_DIR,
        COMPANION_BASE=workout_core.COMPANION_BASE,
        COMPANION_TIMEOUT=workout_core.COMPANION_TIMEOUT,
        TICK_INTERVAL=1.0,
        AUTOSTART_PLAYER=True,
    )
    if test_config:
        app.config.update(test_config)

    # ───────────── Services ─────────────
    data_dir = ensure_data_files(app.config["DATA_DIR"])
    catalog_path, log_path, settings_path = data_paths(data_dir)

    catalog = Catalog.load(catalog_path)
    video = VideoManager(
        app.config["VIDEO_BASE_URL"],
        app.config["CACHE_DIR"],
        local_url="/workout/videos/cache/{name}",
    )
    link = CompanionLink(
        app.config["COMPANION_BASE"],
        timeout=app.config["COMPANION_TIMEOUT"],
        executor=app.config.get("COMPANION_EXECUTOR"),
        session=app.config.get("COMPANION_SESSION"),
    )
    service = WorkoutService(
        catalog,
        video,
        link,
        settings_path=settings_path,
        log_path=log_path,
        tick_interval=app.config["TICK_INTERVAL"],
        autostart_loop=app.config["AUTOSTART_PLAYER"],
        rng=app.config.get("RNG"),
        media_executor=app.config.get("MEDIA_EXECUTOR"),
    )
    app.extensions["workout"] = {
        "catalog": catalog,
        "video": video,
        "link": link,
        "service": service,
    }
    atexit.register(service.shutdown)

    app.register_blueprint(workout_bp, url_prefix="/workout")

    # ───────────── Routes ─────────────
    @app.route("/")
    def index():
        links = [
            {"name": "Exercises", "url": url_for("workout.catalog"), "description": "Browse the exercise catalog."},
            {"name": "Generate", "url": url_for("workout.generate"), "description": "Build a new routine (POST)."},
            {"name": "Player", "url": url_for("workout.player"), "description": "Current playback state."},
            {"name": "Settings", "url": url_for("workout.settings"), "description": "Video mode and defaults."},
            {"name": "History", "url": url_for("workout.workout_logs"), "description": "Finished workouts."},
        ]
        settings = service.settings
        return jsonify({
            "links": links,
            # the client asks for a video mode until one has been picked
            "prompt_video_mode": not settings.get("did_prompt_for_video_mode"),
        })

    @app.route("/healthz")
    def healthz():
        return jsonify({"ok": True})

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", "8000")), debug=False)
