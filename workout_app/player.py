"""
Workout playback.

``WorkoutPlayer`` is the countdown state machine (Idle -> Running <-> Paused
-> Complete). It is not thread safe: only ``PlayerLoop`` calls into it, from
the one thread that drains the loop's event queue. Everything else (HTTP
handlers, media workers) posts events to the loop.
"""

import logging
import queue
import threading
import time
from datetime import datetime
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

from .feedback import FeedbackEvent

logger = logging.getLogger(__name__)

WARNING_AT = 3


class PlayerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"


@dataclass(frozen=True)
class WorkoutState:
    """Snapshot mirrored to the companion device."""

    current_exercise_name: str
    current_index: int
    total_exercises: int
    time_remaining: int
    is_rest: bool
    next_exercise_name: Optional[str]
    is_playing: bool
    is_paused: bool

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict):
        return cls(
            current_exercise_name=str(data["current_exercise_name"]),
            current_index=int(data["current_index"]),
            total_exercises=int(data["total_exercises"]),
            time_remaining=int(data["time_remaining"]),
            is_rest=bool(data["is_rest"]),
            next_exercise_name=data.get("next_exercise_name"),
            is_playing=bool(data["is_playing"]),
            is_paused=bool(data["is_paused"]),
        )


class _Silent:
    def play(self, event):
        pass


class WorkoutPlayer:
    def __init__(self, routine, exercise_duration: int, rest_duration: int,
                 feedback=None, video=None, link=None, media_request=None, on_finish=None):
        self.routine = list(routine)
        self.exercise_duration = exercise_duration
        self.rest_duration = rest_duration
        self.feedback = feedback or _Silent()
        self.video = video
        self.link = link
        # media_request(index, url) prepares media off-thread and later calls media_ready()
        self.media_request = media_request
        self.on_finish = on_finish

        self.phase = PlayerPhase.IDLE
        self.index = 0
        self.time_remaining = self._duration_for(self.current)
        self.video_url = None
        self.started_at = None

    # ───────── Derived state ─────────

    @property
    def current(self):
        if self.index < len(self.routine):
            return self.routine[self.index]
        return None

    @property
    def next_entry(self):
        if self.index + 1 < len(self.routine):
            return self.routine[self.index + 1]
        return None

    @property
    def is_playing(self) -> bool:
        return self.phase in (PlayerPhase.RUNNING, PlayerPhase.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.phase is PlayerPhase.PAUSED

    def _duration_for(self, entry):
        if entry is None:
            return 0
        return self.rest_duration if entry.is_rest else self.exercise_duration

    def snapshot(self) -> WorkoutState:
        entry = self.current
        nxt = self.next_entry
        return WorkoutState(
            current_exercise_name=entry.name if entry else "Workout Complete",
            current_index=self.index,
            total_exercises=len(self.routine),
            time_remaining=self.time_remaining,
            is_rest=bool(entry and entry.is_rest),
            next_exercise_name=nxt.name if nxt else None,
            is_playing=self.is_playing,
            is_paused=self.is_paused,
        )

    def view(self) -> dict:
        data = self.snapshot().to_dict()
        data["phase"] = self.phase.value
        data["video"] = None
        if self.video_url:
            data["video"] = {
                "url": self.video_url,
                "loop": True,
                "playing": self.phase is PlayerPhase.RUNNING,
            }
        return data

    # ───────── Transport controls ─────────

    def start(self) -> bool:
        if self.phase not in (PlayerPhase.IDLE, PlayerPhase.COMPLETE) or not self.routine:
            return False
        if self.phase is PlayerPhase.COMPLETE:
            self.index = 0
            self.time_remaining = self._duration_for(self.current)
        self.phase = PlayerPhase.RUNNING
        self.started_at = datetime.now().isoformat()
        self._emit(FeedbackEvent.START)
        self._send_control("workoutStarted")
        self._enter_entry()
        return True

    def pause(self) -> bool:
        if self.phase is not PlayerPhase.RUNNING:
            return False
        self.phase = PlayerPhase.PAUSED
        self._emit(FeedbackEvent.WARNING)
        self._send_control("workoutPaused")
        self._push_state()
        return True

    def resume(self) -> bool:
        if self.phase is not PlayerPhase.PAUSED:
            return False
        self.phase = PlayerPhase.RUNNING
        self._emit(FeedbackEvent.WARNING)
        self._send_control("workoutResumed")
        self._push_state()
        return True

    def toggle_pause(self) -> bool:
        if self.phase is PlayerPhase.PAUSED:
            return self.resume()
        return self.pause()

    def skip(self) -> bool:
        if not self.is_playing:
            return False
        self._emit(FeedbackEvent.WARNING)
        self._advance()
        return True

    def stop(self) -> bool:
        was_active = self.is_playing
        if was_active and self.on_finish:
            self.on_finish(self, completed=False)
        self.video_url = None
        self.phase = PlayerPhase.IDLE
        self.index = 0
        self.time_remaining = self._duration_for(self.current)
        if was_active:
            self._send_control("workoutStopped")
            self._push_state()
        return was_active

    def tick(self) -> bool:
        """One second of countdown. Ignored unless running."""
        if self.phase is not PlayerPhase.RUNNING:
            return False

        self.time_remaining -= 1
        if self.time_remaining == WARNING_AT:
            self._emit(FeedbackEvent.WARNING)

        if self.time_remaining <= 0:
            self._emit(FeedbackEvent.END)
            self._advance()
        elif self.link is not None:
            self.link.send_timer_update(self.time_remaining)
        return True

    # ───────── Media ─────────

    def media_ready(self, index: int, url: str, ok: bool = True):
        """Result of an off-thread media preparation for entry `index`."""
        entry = self.current
        if index != self.index or entry is None or entry.is_rest or not self.is_playing:
            logger.debug("dropping stale media result for entry %s", index)
            return
        # Failed load aborts presentation
        self.video_url = url if ok else None

    def _enter_entry(self):
        entry = self.current
        self.video_url = None
        if entry is not None and not entry.is_rest and self.video is not None:
            url = self.video.playable_url(entry.video_path)
            if url:
                if self.media_request is not None:
                    self.media_request(self.index, url)
                else:
                    self.video_url = url
        self._push_state()

    # ───────── Internals ─────────

    def _advance(self):
        self.index += 1
        if self.index >= len(self.routine):
            self._complete()
            return
        self.time_remaining = self._duration_for(self.current)
        self._enter_entry()
        self._emit(FeedbackEvent.START)

    def _complete(self):
        self.index = len(self.routine)
        self.time_remaining = 0
        self.video_url = None
        self.phase = PlayerPhase.COMPLETE
        self._emit(FeedbackEvent.COMPLETE)
        self._push_state()
        if self.on_finish:
            self.on_finish(self, completed=True)

    def _emit(self, event: FeedbackEvent):
        self.feedback.play(event)

    def _push_state(self):
        if self.link is not None:
            self.link.update_context(self.snapshot())

    def _send_control(self, kind: str):
        if self.link is not None:
            self.link.send_control(kind)


COMMANDS = ("start", "pause", "resume", "toggle", "skip", "stop")

_STOP_LOOP = object()


class PlayerLoop:
    """
    Single owner of a WorkoutPlayer.

    Commands and media results arrive on a queue; a tick is applied every
    `tick_interval` seconds while the player is running. After each step
    the loop publishes ``view`` (a fresh dict) for readers on other threads.
    """

    def __init__(self, player: WorkoutPlayer, tick_interval: float = 1.0, clock=time.monotonic):
        self.player = player
        self.tick_interval = tick_interval
        self.clock = clock
        self.events = queue.Queue()
        self.view = player.view()
        self._next_tick = None
        self._thread = None

    def post(self, command: str, *args):
        self.events.put((command, args))

    def media_request_for(self, executor, check):
        """Build a player media_request that runs `check(url)` on `executor` and posts the result back."""
        def request(index, url):
            future = executor.submit(check, url)

            def done(fut):
                try:
                    ok = bool(fut.result())
                except Exception:
                    logger.exception("media preparation failed for %s", url)
                    ok = False
                self.post("media_ready", index, url, ok)

            future.add_done_callback(done)
        return request

    def _dispatch(self, command, args):
        if command == "media_ready":
            self.player.media_ready(*args)
        elif command == "toggle":
            self.player.toggle_pause()
        elif command in COMMANDS:
            getattr(self.player, command)()
        else:
            logger.warning("unknown player command %r", command)

    def run_once(self, timeout: Optional[float] = None) -> bool:
        """Process at most one queued event plus any due ticks. Returns False on shutdown."""
        now = self.clock()
        if self.player.phase is PlayerPhase.RUNNING and self._next_tick is None:
            self._next_tick = now + self.tick_interval

        wait = timeout
        if self._next_tick is not None:
            until_tick = max(0.0, self._next_tick - now)
            wait = until_tick if wait is None else min(wait, until_tick)

        try:
            if wait is not None and wait <= 0:
                item = self.events.get_nowait()
            else:
                item = self.events.get(timeout=wait)
        except queue.Empty:
            item = None

        if item is _STOP_LOOP:
            return False
        if item is not None:
            self._dispatch(*item)

        if self.player.phase is PlayerPhase.RUNNING:
            if self._next_tick is None:
                self._next_tick = self.clock() + self.tick_interval
            while self.player.phase is PlayerPhase.RUNNING and self.clock() >= self._next_tick:
                self.player.tick()
                self._next_tick += self.tick_interval
        if self.player.phase is not PlayerPhase.RUNNING:
            self._next_tick = None

        self.view = self.player.view()
        return True

    def start(self):
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="workout-player", daemon=True)
        self._thread.start()

    def _run(self):
        while self.run_once(timeout=0.5):
            pass

    def shutdown(self, wait: bool = True):
        """Stop the loop once every event queued so far has been handled."""
        self.events.put(_STOP_LOOP)
        thread = self._thread
        if thread is None:
            # no owner thread, drain here
            while self.run_once(timeout=0):
                pass
        elif wait and thread is not threading.current_thread():
            thread.join(timeout=2)
        self._thread = None
