"""
Phone side of the companion (wrist device) channel.

State snapshots go through ``update_context`` (latest value wins, the newest
one is re-sent on the next successful contact). Timer ticks, feedback and
control messages are fire-and-forget: if the device does not answer they
are dropped.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import requests

logger = logging.getLogger(__name__)

# Message type tags
EXERCISE_CHANGED = "exerciseChanged"
TIMER_UPDATE = "timerUpdate"
FEEDBACK_EVENT = "feedbackEvent"
WORKOUT_STARTED = "workoutStarted"
WORKOUT_PAUSED = "workoutPaused"
WORKOUT_RESUMED = "workoutResumed"
WORKOUT_STOPPED = "workoutStopped"

CONTROL_TYPES = {WORKOUT_STARTED, WORKOUT_PAUSED, WORKOUT_RESUMED, WORKOUT_STOPPED}
MESSAGE_TYPES = CONTROL_TYPES | {TIMER_UPDATE, FEEDBACK_EVENT}


def context_message(state) -> dict:
    return {"type": EXERCISE_CHANGED, "state": state.to_dict()}


class CompanionLink:
    def __init__(self, base_url: str = "", timeout: float = 1.5, executor=None, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()
        # one worker keeps sends off the player thread without reordering them
        self._executor = executor
        self._lock = threading.Lock()
        self._pending_context = None

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _submit(self, fn, *args):
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="companion")
        self._executor.submit(fn, *args)

    # ───────── Context (latest wins) ─────────

    def update_context(self, state):
        if not self.enabled:
            return
        with self._lock:
            self._pending_context = context_message(state)
        self._submit(self._flush_context)

    def _flush_context(self) -> bool:
        with self._lock:
            payload = self._pending_context
        if payload is None:
            return True
        try:
            r = self.http.post(f"{self.base_url}/context", json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.debug("companion context not delivered: %s", e)
            return False
        with self._lock:
            # a newer context may have arrived meanwhile
            if self._pending_context is payload:
                self._pending_context = None
        return True

    @property
    def has_pending_context(self) -> bool:
        return self._pending_context is not None

    # ───────── Messages (at most once) ─────────

    def send_message(self, message: dict):
        if not self.enabled:
            return
        self._submit(self._deliver, message)

    def _deliver(self, message: dict) -> bool:
        try:
            r = self.http.post(f"{self.base_url}/message", json=message, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.debug("companion dropped %s: %s", message.get("type"), e)
            return False
        # device is reachable again, push any context it missed
        if self.has_pending_context:
            self._flush_context()
        return True

    def send_timer_update(self, time_remaining: int):
        self.send_message({"type": TIMER_UPDATE, "time": int(time_remaining)})

    def send_feedback_event(self, event):
        self.send_message({"type": FEEDBACK_EVENT, "event": getattr(event, "value", event)})

    def send_control(self, kind: str):
        if kind not in CONTROL_TYPES:
            raise ValueError(f"unknown control message {kind!r}")
        self.send_message({"type": kind})

    # ───────── Status ─────────

    def fetch_status(self):
        """Return (online_bool, payload_or_none)."""
        if not self.enabled:
            return False, None
        try:
            r = self.http.get(f"{self.base_url}/status", timeout=self.timeout)
            r.raise_for_status()
            return True, r.json()
        except (requests.RequestException, ValueError):
            return False, None

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
