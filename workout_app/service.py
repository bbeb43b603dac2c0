import logging
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial

from .feedback import CueBoard, build_feedback
from .generate import generate_routine
from .player import COMMANDS, PlayerLoop, WorkoutPlayer
from .storage import append_workout_log, load_settings, save_settings
from .transfer import export_routine, import_routine

logger = logging.getLogger(__name__)


class WorkoutService:
    """
    Owns the current routine and its player loop.

    Built once by the application factory together with the catalog, video
    manager and companion link it is handed.
    """

    def __init__(self, catalog, video, link, settings_path: str, log_path: str,
                 tick_interval: float = 1.0, autostart_loop: bool = True, rng=None, media_executor=None):
        self.catalog = catalog
        self.video = video
        self.link = link
        self.settings_path = settings_path
        self.log_path = log_path
        self.tick_interval = tick_interval
        self.autostart_loop = autostart_loop
        self.rng = rng or random.Random()
        self.cues = CueBoard()
        self.media_executor = media_executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="media")

        self.settings = load_settings(settings_path)
        self.video.configure(self.settings)

        self.routine = []
        self.params = {}
        self.exercise_duration = self.settings["exercise_duration"]
        self.rest_duration = self.settings["rest_duration"]
        self.loop = None
        self._reset_player()

    # ───────── Settings ─────────

    def update_settings(self, changes: dict) -> dict:
        self.settings.update(changes)
        save_settings(self.settings_path, self.settings)
        self.video.configure(self.settings)
        return self.settings

    # ───────── Routine ─────────

    def generate(self, focus_areas, difficulty, total_minutes, exercise_duration, rest_duration, rest_every):
        routine = generate_routine(
            self.catalog, focus_areas, difficulty, total_minutes,
            exercise_duration, rest_duration, rest_every, rng=self.rng,
        )
        self.params = {
            "focus_areas": list(focus_areas),
            "difficulty": difficulty,
            "total_minutes": total_minutes,
            "rest_every": rest_every,
        }
        self.replace_routine(routine, exercise_duration, rest_duration)
        return routine

    def replace_routine(self, routine, exercise_duration, rest_duration):
        self.routine = list(routine)
        self.exercise_duration = exercise_duration
        self.rest_duration = rest_duration
        self._reset_player()

    def export(self) -> dict:
        return export_routine(self.routine, self.exercise_duration, self.rest_duration)

    def import_document(self, doc):
        """Raises RoutineFormatError and leaves the current routine untouched on bad input."""
        imported = import_routine(doc, self.catalog, self.exercise_duration, self.rest_duration)
        self.params = {"imported": True}
        self.replace_routine(imported.routine, imported.exercise_duration, imported.rest_duration)
        return imported

    def routine_view(self) -> dict:
        return {
            "exercises": [ex.to_dict() for ex in self.routine],
            "exercise_duration": self.exercise_duration,
            "rest_duration": self.rest_duration,
            "params": self.params,
        }

    # ───────── Player ─────────

    def _reset_player(self):
        if self.loop is not None:
            self.loop.post("stop")
            self.loop.shutdown()

        feedback = build_feedback(self.settings, self.cues, self.link if self.link.enabled else None)
        player = WorkoutPlayer(
            self.routine,
            self.exercise_duration,
            self.rest_duration,
            feedback=feedback,
            video=self.video,
            link=self.link if self.link.enabled else None,
            on_finish=partial(self._log_finished, params=dict(self.params)),
        )
        self.loop = PlayerLoop(player, tick_interval=self.tick_interval)
        player.media_request = self.loop.media_request_for(self.media_executor, self.video.check_playable)

    def command(self, name: str) -> bool:
        if name not in COMMANDS:
            return False
        self.loop.post(name)
        if self.autostart_loop:
            self.loop.start()
        return True

    def player_view(self) -> dict:
        return self.loop.view

    def _log_finished(self, player, completed: bool, params=None):
        """Persist a finished or stopped workout to the workout log file."""
        entry = {
            "started_at": player.started_at,
            "ended_at": datetime.now().isoformat(),
            "completed": completed,
            "params": params or {},
            "exercise_duration": player.exercise_duration,
            "rest_duration": player.rest_duration,
            "exercises": [ex.name for ex in player.routine if not ex.is_rest],
            "reached_index": player.index,
            "total": len(player.routine),
        }
        append_workout_log(self.log_path, entry)
        logger.info("workout %s after %s/%s entries", "completed" if completed else "stopped",
                    player.index, len(player.routine))

    def shutdown(self):
        if self.loop is not None:
            self.loop.shutdown()
        self.media_executor.shutdown(wait=False)
        self.video.shutdown()
        self.link.shutdown()
