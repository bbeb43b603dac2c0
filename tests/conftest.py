import random
from concurrent.futures import Future

import pytest
import requests

import workout_core
from workout_app.catalog import Catalog


class InlineExecutor:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.calls = []

    def submit(self, fn, *args):
        self.calls.append((fn, args))
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status_code = status
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeHttp:
    """Stands in for a requests.Session talking to the companion device."""

    def __init__(self, online=True):
        self.online = online
        self.posts = []

    def post(self, url, json=None, timeout=None):
        if not self.online:
            raise requests.ConnectionError("companion unreachable")
        self.posts.append((url, json))
        return FakeResponse()

    def get(self, url, timeout=None):
        if not self.online:
            raise requests.ConnectionError("companion unreachable")
        return FakeResponse(payload={"ok": True})

    def messages(self):
        return [body for url, body in self.posts if url.endswith("/message")]

    def contexts(self):
        return [body for url, body in self.posts if url.endswith("/context")]


@pytest.fixture(autouse=True)
def _isolated_action_log(tmp_path, monkeypatch):
    monkeypatch.setattr(workout_core, "LOG_FILE", str(tmp_path / "logs.jsonl"))
    yield


@pytest.fixture
def catalog():
    return Catalog({
        "Legs": {
            "Beginner": [{"name": "Squats", "video_path": "/resources/squats.mp4"}],
            "Medium": [{"name": "Frog Hops", "video_path": "/resources/frogHops.mp4"}],
            "Hard": [{"name": "Ninja Tuck Jumps", "video_path": "/resources/ninjaTuckJumps.mp4"}],
            "Expert/Advanced": [{"name": "Triple Skyfalls", "video_path": "/resources/3xskyfalls.mp4"}],
        },
        "Core": {
            "Beginner": [
                {"name": "Bear Taps", "video_path": "/resources/bearTapsAngle2.mp4"},
                {"name": "Walking Marches"},
            ],
            "Medium": [{"name": "Russian V-Twists", "video_path": "/resources/russianVTwistsAngle1.mp4"}],
        },
    })


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def app(tmp_path, monkeypatch, fake_http, inline_executor):
    from app import create_app
    from workout_app import video

    monkeypatch.setattr(video.requests, "head", lambda url, **kw: FakeResponse())

    app = create_app({
        "TESTING": True,
        "DATA_DIR": str(tmp_path / "data"),
        "CACHE_DIR": str(tmp_path / "cache"),
        "VIDEO_BASE_URL": "https://videos.example.com/",
        "COMPANION_BASE": "http://watch.local",
        "COMPANION_SESSION": fake_http,
        "COMPANION_EXECUTOR": inline_executor,
        "MEDIA_EXECUTOR": inline_executor,
        "AUTOSTART_PLAYER": False,
        # tests drive ticks explicitly
        "TICK_INTERVAL": 3600.0,
        "RNG": random.Random(7),
    })
    yield app
    app.extensions["workout"]["service"].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return app.extensions["workout"]["service"]
