"""
Feedback cues for workout playback.

Each output target (speaker tone, vibration, companion device) is a small
class with a ``play(event)`` method. The set in use is picked once at
startup by ``build_feedback`` from the stored settings.
"""

import io
import math
import struct
import threading
import wave
from collections import deque
from enum import Enum


class FeedbackEvent(str, Enum):
    START = "start"
    WARNING = "warning"
    END = "end"
    COMPLETE = "complete"


# (frequency Hz, duration s)
TONES = {
    FeedbackEvent.START: (880.0, 0.15),
    FeedbackEvent.WARNING: (1200.0, 0.12),
    FeedbackEvent.END: (523.25, 0.25),
    FeedbackEvent.COMPLETE: (523.25, 0.25),
}

# navigator.vibrate() style patterns in ms
VIBRATION_PATTERNS = {
    FeedbackEvent.START: [40],
    FeedbackEvent.WARNING: [20, 60, 20],
    FeedbackEvent.END: [80, 40, 80],
    FeedbackEvent.COMPLETE: [100, 50, 100, 50, 200],
}

SAMPLE_RATE = 44100


def render_tone(event: FeedbackEvent, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Render the cue for `event` as a mono 16-bit WAV file."""
    frequency, duration = TONES[FeedbackEvent(event)]
    frame_count = int(round(sample_rate * duration))
    frames = bytearray()
    for i in range(frame_count):
        sample = math.sin(2.0 * math.pi * frequency * i / sample_rate) * 0.5
        frames += struct.pack("<h", int(sample * 32767))

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(bytes(frames))
    return buf.getvalue()


class CueBoard:
    """Bounded list of recent cues the client polls by sequence number."""

    def __init__(self, maxlen: int = 100):
        self._cues = deque(maxlen=maxlen)
        self._seq = 0
        self._lock = threading.Lock()

    def post(self, kind: str, event: FeedbackEvent, **extra):
        with self._lock:
            self._seq += 1
            cue = {"seq": self._seq, "kind": kind, "event": FeedbackEvent(event).value}
            cue.update(extra)
            self._cues.append(cue)
            return cue

    def since(self, after: int = 0):
        with self._lock:
            return [c for c in self._cues if c["seq"] > after]

    @property
    def last_seq(self) -> int:
        return self._seq


class ToneFeedback:
    def __init__(self, board: CueBoard, tone_url="/workout/tones/{event}.wav"):
        self.board = board
        self.tone_url = tone_url

    def play(self, event):
        event = FeedbackEvent(event)
        self.board.post("tone", event, url=self.tone_url.format(event=event.value))


class VibrationFeedback:
    def __init__(self, board: CueBoard):
        self.board = board

    def play(self, event):
        event = FeedbackEvent(event)
        self.board.post("vibrate", event, pattern=VIBRATION_PATTERNS[event])


class CompanionFeedback:
    def __init__(self, link):
        self.link = link

    def play(self, event):
        self.link.send_feedback_event(FeedbackEvent(event))


class FeedbackFanout:
    def __init__(self, targets=None):
        self.targets = list(targets or [])

    def play(self, event):
        for target in self.targets:
            target.play(event)


def build_feedback(settings: dict, board: CueBoard, link=None) -> FeedbackFanout:
    targets = []
    if settings.get("enable_sound", True):
        targets.append(ToneFeedback(board))
    if settings.get("enable_haptics", True):
        targets.append(VibrationFeedback(board))
    if link is not None:
        targets.append(CompanionFeedback(link))
    return FeedbackFanout(targets)
