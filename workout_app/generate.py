import math
import random

from .catalog import REST
from .defaults import DIFFICULTIES

MAX_TOTAL_MINUTES = 120
MAX_DURATION = 600
MAX_REST_EVERY = 20


def allowed_levels(difficulty: str):
    """Tiers are cumulative: a tier includes itself and every easier one."""
    if difficulty not in DIFFICULTIES:
        return [DIFFICULTIES[0]]
    return DIFFICULTIES[:DIFFICULTIES.index(difficulty) + 1]


def target_exercise_count(total_seconds: float, exercise_duration: int, rest_duration: int, rest_every: int) -> int:
    full_cycle = exercise_duration + rest_duration / rest_every
    return int(math.ceil(total_seconds / full_cycle))


def create_balanced_routine(pool: list, max_count: int, rng=None):
    rng = rng or random
    shuffled = pool[:]
    rng.shuffle(shuffled)

    unique = []
    seen = set()
    for ex in shuffled:
        if ex.name not in seen and len(unique) < max_count:
            unique.append(ex)
            seen.add(ex.name)

    # Fill remaining slots with repeats, one reshuffle per pass
    result = unique[:]
    while unique and len(result) < max_count:
        reshuffled = unique[:]
        rng.shuffle(reshuffled)
        result.extend(reshuffled[:max_count - len(result)])

    return result


def insert_rests(selected: list, rest_every: int):
    routine = []
    for i, ex in enumerate(selected, start=1):
        routine.append(ex)
        if i % rest_every == 0 and i != len(selected):
            routine.append(REST)
    return routine


def generate_routine(catalog, focus_areas, difficulty: str, total_minutes: float,
                     exercise_duration: int, rest_duration: int, rest_every: int, rng=None):
    if exercise_duration <= 0 or rest_every <= 0 or total_minutes <= 0:
        raise ValueError("exercise_duration, rest_every and total_minutes must be positive")
    if rest_duration < 0:
        raise ValueError("rest_duration cannot be negative")
    if total_minutes > MAX_TOTAL_MINUTES:
        raise ValueError(f"total_minutes cannot exceed {MAX_TOTAL_MINUTES}")
    if exercise_duration > MAX_DURATION or rest_duration > MAX_DURATION:
        raise ValueError(f"durations cannot exceed {MAX_DURATION} seconds")
    if rest_every > MAX_REST_EVERY:
        raise ValueError(f"rest_every cannot exceed {MAX_REST_EVERY}")

    # Filter by focus and allowed difficulty
    levels = allowed_levels(difficulty)
    pool = []
    for area in focus_areas:
        for level in levels:
            pool.extend(catalog.exercises(area, level))

    if not pool:
        return []

    count = target_exercise_count(total_minutes * 60, exercise_duration, rest_duration, rest_every)
    selected = create_balanced_routine(pool, count, rng)
    return insert_rests(selected, rest_every)
