"""Wrist-device side of the companion channel: a passive mirror of the phone."""

import logging
import threading
import time

from .companion import (
    EXERCISE_CHANGED,
    FEEDBACK_EVENT,
    TIMER_UPDATE,
    WORKOUT_PAUSED,
    WORKOUT_RESUMED,
    WORKOUT_STARTED,
    WORKOUT_STOPPED,
)
from .feedback import FeedbackEvent
from .player import WorkoutState

logger = logging.getLogger(__name__)

# feedback event -> wrist haptic name
HAPTICS = {
    FeedbackEvent.START: "start",
    FeedbackEvent.WARNING: "notification",
    FeedbackEvent.END: "stop",
    FeedbackEvent.COMPLETE: "success",
}


class HapticLog:
    """Records played haptics; a device build would drive its motor here."""

    def __init__(self, maxlen: int = 50):
        self.played = []
        self.maxlen = maxlen

    def play(self, haptic: str):
        self.played.append({"haptic": haptic, "at": time.time()})
        del self.played[:-self.maxlen]


class WorkoutSessionTracker:
    """Wrist workout session: start / pause / resume / end with active time."""

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self.active = False
        self.paused = False
        self.started_at = None
        self.ended_at = None
        self._active_seconds = 0.0
        self._resumed_at = None

    def start(self):
        if self.active:
            return
        self.active = True
        self.paused = False
        self.started_at = time.time()
        self.ended_at = None
        self._active_seconds = 0.0
        self._resumed_at = self.clock()

    def pause(self):
        if not self.active or self.paused:
            return
        self._active_seconds += self.clock() - self._resumed_at
        self._resumed_at = None
        self.paused = True

    def resume(self):
        if not self.active or not self.paused:
            return
        self._resumed_at = self.clock()
        self.paused = False

    def end(self):
        if not self.active:
            return
        self.pause()
        self.active = False
        self.paused = False
        self.ended_at = time.time()

    @property
    def active_seconds(self) -> float:
        running = self.clock() - self._resumed_at if self._resumed_at is not None else 0.0
        return self._active_seconds + running

    def to_dict(self) -> dict:
        return {
            "active": self.active,
            "paused": self.paused,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "active_seconds": round(self.active_seconds, 1),
        }


class CompanionMirror:
    def __init__(self, haptics=None, session=None):
        self.haptics = haptics or HapticLog()
        self.session = session or WorkoutSessionTracker()
        self.state = None
        self._lock = threading.Lock()

    def receive_context(self, context: dict) -> bool:
        if not isinstance(context, dict) or context.get("type") != EXERCISE_CHANGED:
            return False
        try:
            state = WorkoutState.from_dict(context["state"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("failed to decode workout state: %s", e)
            return False
        with self._lock:
            self.state = state
        return True

    def receive_message(self, message: dict) -> bool:
        kind = message.get("type") if isinstance(message, dict) else None

        if kind == TIMER_UPDATE:
            try:
                seconds = int(message["time"])
            except (KeyError, TypeError, ValueError):
                return False
            self._update_time(seconds)
        elif kind == FEEDBACK_EVENT:
            try:
                event = FeedbackEvent(message.get("event"))
            except ValueError:
                return False
            self.haptics.play(HAPTICS[event])
        elif kind == WORKOUT_STARTED:
            self.session.start()
        elif kind == WORKOUT_PAUSED:
            self.session.pause()
        elif kind == WORKOUT_RESUMED:
            self.session.resume()
        elif kind == WORKOUT_STOPPED:
            self.session.end()
            with self._lock:
                self.state = None
        else:
            return False
        return True

    def _update_time(self, seconds: int):
        with self._lock:
            if self.state is None:
                # show the timer even before a full state arrives
                self.state = WorkoutState(
                    current_exercise_name="Workout",
                    current_index=0,
                    total_exercises=0,
                    time_remaining=seconds,
                    is_rest=False,
                    next_exercise_name=None,
                    is_playing=True,
                    is_paused=False,
                )
            else:
                data = self.state.to_dict()
                data["time_remaining"] = seconds
                self.state = WorkoutState.from_dict(data)

    def display(self) -> dict:
        """What the wrist face shows."""
        state = self.state
        if state is None:
            return {"active": False, "title": "No Active Workout", "hint": "Start a workout on your phone"}
        status = "Paused" if state.is_paused else ("Active" if state.is_playing else "")
        return {
            "active": True,
            "title": state.current_exercise_name,
            "timer": state.time_remaining,
            "progress": f"{state.current_index + 1} of {state.total_exercises}",
            "next": state.next_exercise_name,
            "status": status,
        }
