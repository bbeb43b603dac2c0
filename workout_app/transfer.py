import json
from collections import namedtuple

from .catalog import REST, Exercise

FORMAT_VERSION = 1

EXERCISE_DURATION_RANGE = (5, 600)
REST_DURATION_RANGE = (0, 600)
SETS_RANGE = (1, 50)
# longest routine the generator can build: 120 min of 1 s exercises with rests between
MAX_ENTRIES = 15000

ImportedRoutine = namedtuple("ImportedRoutine", ["routine", "exercise_duration", "rest_duration"])


class RoutineFormatError(ValueError):
    """Raised when an imported routine document cannot be read."""


def _clamp(value, bounds):
    low, high = bounds
    return max(low, min(high, int(value)))


def export_routine(routine, exercise_duration: int, rest_duration: int) -> dict:
    items = []
    for ex in routine:
        items.append({
            "name": ex.name,
            "time_based": True,
            "exercise_duration": exercise_duration,
            "rest_duration": rest_duration,
            "sets": 1,
        })
    return {"version": FORMAT_VERSION, "exercises": items}


def dumps(routine, exercise_duration: int, rest_duration: int) -> str:
    return json.dumps(export_routine(routine, exercise_duration, rest_duration), indent=2)


def import_routine(doc, catalog, exercise_duration: int = 20, rest_duration: int = 10) -> ImportedRoutine:
    """
    Rebuild a routine from an exported document.

    Names are resolved against the catalog; unknown names become placeholder
    exercises without video. Durations come from the last time-based entry,
    clamped to sane bounds; the passed-in values are used if there is none.
    """
    if isinstance(doc, (str, bytes)):
        try:
            doc = json.loads(doc)
        except ValueError as e:
            raise RoutineFormatError(f"not valid JSON: {e}") from e

    if not isinstance(doc, dict) or not isinstance(doc.get("exercises"), list):
        raise RoutineFormatError("document must be an object with an 'exercises' list")

    routine = []
    for pos, item in enumerate(doc["exercises"]):
        if not isinstance(item, dict):
            raise RoutineFormatError(f"entry {pos} is not an object")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise RoutineFormatError(f"entry {pos} has no name")
        name = name.strip()

        try:
            sets = _clamp(item.get("sets", 1), SETS_RANGE)
            if item.get("time_based", True):
                if "exercise_duration" in item:
                    exercise_duration = _clamp(item["exercise_duration"], EXERCISE_DURATION_RANGE)
                if "rest_duration" in item:
                    rest_duration = _clamp(item["rest_duration"], REST_DURATION_RANGE)
        except (TypeError, ValueError, OverflowError) as e:
            raise RoutineFormatError(f"entry {pos} has a bad number: {e}") from e

        if name == REST.name:
            ex = REST
        else:
            ex = catalog.find(name) or Exercise(name, None)
        routine.extend([ex] * sets)
        if len(routine) > MAX_ENTRIES:
            raise RoutineFormatError(f"routine is longer than {MAX_ENTRIES} entries")

    return ImportedRoutine(routine, exercise_duration, rest_duration)
