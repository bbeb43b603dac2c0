import pytest

from companion_app import create_app
from workout_app.mirror import CompanionMirror, WorkoutSessionTracker


STATE = {
    "current_exercise_name": "Squats",
    "current_index": 1,
    "total_exercises": 5,
    "time_remaining": 20,
    "is_rest": False,
    "next_exercise_name": "Rest",
    "is_playing": True,
    "is_paused": False,
}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def mirror():
    return CompanionMirror(session=WorkoutSessionTracker(clock=FakeClock()))


def test_context_replaces_state(mirror):
    assert mirror.receive_context({"type": "exerciseChanged", "state": STATE})
    assert mirror.state.current_exercise_name == "Squats"
    assert mirror.display()["progress"] == "2 of 5"
    assert mirror.display()["status"] == "Active"


def test_malformed_context_is_ignored(mirror):
    assert not mirror.receive_context({"type": "exerciseChanged", "state": {"current_index": 1}})
    assert not mirror.receive_context({"type": "somethingElse"})
    assert mirror.state is None


def test_timer_update_without_state_creates_minimal_one(mirror):
    assert mirror.receive_message({"type": "timerUpdate", "time": 9})
    assert mirror.state.current_exercise_name == "Workout"
    assert mirror.state.time_remaining == 9


def test_timer_update_keeps_other_fields(mirror):
    mirror.receive_context({"type": "exerciseChanged", "state": STATE})
    mirror.receive_message({"type": "timerUpdate", "time": 7})
    assert mirror.state.time_remaining == 7
    assert mirror.state.next_exercise_name == "Rest"


@pytest.mark.parametrize("event,haptic", [
    ("start", "start"),
    ("warning", "notification"),
    ("end", "stop"),
    ("complete", "success"),
])
def test_feedback_plays_local_haptic(mirror, event, haptic):
    mirror.receive_message({"type": "feedbackEvent", "event": event})
    assert mirror.haptics.played[-1]["haptic"] == haptic


def test_unknown_messages_are_ignored(mirror):
    assert not mirror.receive_message({"type": "dance"})
    assert not mirror.receive_message({"type": "feedbackEvent", "event": "boom"})
    assert mirror.haptics.played == []


def test_control_messages_drive_session(mirror):
    clock = mirror.session.clock
    mirror.receive_message({"type": "workoutStarted"})
    clock.now += 10
    mirror.receive_message({"type": "workoutPaused"})
    clock.now += 30
    mirror.receive_message({"type": "workoutResumed"})
    clock.now += 5
    mirror.receive_context({"type": "exerciseChanged", "state": STATE})
    mirror.receive_message({"type": "workoutStopped"})

    assert mirror.session.active is False
    assert mirror.session.active_seconds == pytest.approx(15)
    assert mirror.state is None
    assert mirror.display()["title"] == "No Active Workout"


def test_companion_service_endpoints(mirror):
    client = create_app(mirror).test_client()

    assert client.get("/status").get_json()["ok"] is True
    assert client.post("/context", json={"type": "exerciseChanged", "state": STATE}).status_code == 200
    assert client.post("/context", json={"type": "exerciseChanged"}).status_code == 400

    r = client.post("/message", json={"type": "feedbackEvent", "event": "end"})
    assert r.get_json() == {"ok": True, "handled": True}
    r = client.post("/message", json={"type": "whatever"})
    assert r.get_json() == {"ok": True, "handled": False}

    data = client.get("/state").get_json()
    assert data["state"]["current_exercise_name"] == "Squats"
    assert data["haptics"][-1]["haptic"] == "stop"
    assert client.get("/session").get_json()["active"] is False
