#!/usr/bin/env python3
"""Companion (wrist device) service: receives pushes from the phone app."""
import os
import logging
import sys

from flask import Flask, jsonify, request

from workout_app.mirror import CompanionMirror

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def create_app(mirror=None):
    app = Flask(__name__)
    mirror = mirror or CompanionMirror()
    app.extensions["mirror"] = mirror

    @app.route("/status", methods=["GET"])
    def status():
        return jsonify({"ok": True, "session": mirror.session.to_dict()})

    @app.route("/context", methods=["POST"])
    def context():
        data = request.get_json(force=True, silent=True) or {}
        if not mirror.receive_context(data):
            return jsonify({"ok": False, "error": "invalid_context"}), 400
        return jsonify({"ok": True})

    @app.route("/message", methods=["POST"])
    def message():
        data = request.get_json(force=True, silent=True) or {}
        # unknown or malformed messages are accepted and ignored
        handled = mirror.receive_message(data)
        if not handled:
            logger.info("ignored companion message %r", data.get("type"))
        return jsonify({"ok": True, "handled": handled})

    @app.route("/state", methods=["GET"])
    def state():
        current = mirror.state
        return jsonify({
            "state": current.to_dict() if current else None,
            "display": mirror.display(),
            "haptics": mirror.haptics.played[-10:],
        })

    @app.route("/session", methods=["GET"])
    def session():
        return jsonify(mirror.session.to_dict())

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("COMPANION_PORT", "8001")), debug=False)
